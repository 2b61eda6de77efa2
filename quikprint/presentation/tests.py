import hashlib
import hmac
import json
import shutil
import tempfile
from decimal import Decimal
from unittest.mock import Mock, patch

from django.contrib.auth import get_user_model
from django.core import mail
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import RequestFactory, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from quikprint.catalog.models import Category as CategoryModel, Product as ProductModel, QuantityTier
from quikprint.core.entities import Order, PaymentTransaction
from quikprint.orders.models import Order as OrderModel
from .context_processors import cart_context

PAPER_OPTION = {
    'id': 'paper',
    'name': 'Paper',
    'type': 'select',
    'options': [
        {'value': 'standard', 'label': 'Standard', 'priceModifier': 0},
        {'value': 'premium', 'label': 'Premium', 'priceModifier': 500},
    ],
}


class StorefrontAPITestCase(APITestCase):
    """Shared catalog and accounts."""

    def setUp(self):
        self.category = CategoryModel.objects.create(name='Business Cards')
        self.card = ProductModel.objects.create(
            category=self.category,
            name='Business Cards',
            slug='business-cards',
            base_price=Decimal('5000.00'),
            options=[PAPER_OPTION],
        )
        self.flyer = ProductModel.objects.create(
            category=self.category,
            name='Flyers',
            slug='flyers',
            base_price=Decimal('20000.00'),
            min_quantity=100,
            options=[
                {'id': 'quantity', 'name': 'Quantity', 'type': 'select', 'options': [
                    {'value': '100', 'label': '100 pcs'},
                    {'value': '500', 'label': '500 pcs'},
                ]},
            ],
        )
        QuantityTier.objects.create(product=self.flyer, min_qty=500, max_qty=999, price=Decimal('45000'))

        User = get_user_model()
        self.customer = User.objects.create_user(email='ada@example.com', password='s3cret-pass-42',
                                                 first_name='Ada', last_name='Obi')
        self.other_customer = User.objects.create_user(email='bayo@example.com', password='s3cret-pass-42')
        self.admin = User.objects.create_superuser(email='admin@quikprint.test', password='admin-pass-42')

    def add_card_to_cart(self, paper='premium', quantity=None):
        payload = {'product_slug': 'business-cards', 'configuration': {'paper': paper}}
        if quantity:
            payload['quantity'] = quantity
        return self.client.post(reverse('cart-items'), payload, format='json')

    def checkout(self):
        return self.client.post(reverse('checkout'), {
            'name': 'Ada Obi', 'street': '1 Marina', 'city': 'Lagos', 'state': 'Lagos',
        }, format='json')

    def place_order(self, user=None):
        """Fills the cart and checks out as the given user."""
        self.client.force_authenticate(user=user or self.customer)
        self.add_card_to_cart()
        response = self.checkout()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return response.data


# ====================================================================
# CATALOG AND PRICING
# ====================================================================

class CatalogAPITestCase(StorefrontAPITestCase):

    def test_list_categories_with_counts(self):
        response = self.client.get('/api/categories/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['slug'], 'business-cards')
        self.assertEqual(response.data[0]['product_count'], 2)

    def test_list_products_filters(self):
        self.assertEqual(len(self.client.get('/api/products/').data), 2)
        response = self.client.get('/api/products/', {'search': 'flyer'})
        self.assertEqual([p['slug'] for p in response.data], ['flyers'])
        self.assertEqual(len(self.client.get('/api/products/', {'category': 'banners'}).data), 0)

    def test_product_detail(self):
        response = self.client.get('/api/products/business-cards/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['options'][0]['choices'][1]['price_modifier'], '500.00')

    def test_inactive_product_is_hidden(self):
        self.card.is_active = False
        self.card.save()
        response = self.client.get('/api/products/business-cards/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertIn('message', response.data)

    def test_only_admins_write_the_catalog(self):
        """
        Scenario: customers cannot create products; admins can, with validated options.
        """
        payload = {'name': 'Stickers', 'base_price': '300.00', 'category': 'business-cards', 'options': []}

        # ACT and ASSERT: customer
        self.client.force_authenticate(user=self.customer)
        self.assertEqual(self.client.post('/api/products/', payload, format='json').status_code,
                         status.HTTP_403_FORBIDDEN)

        # ACT and ASSERT: admin
        self.client.force_authenticate(user=self.admin)
        response = self.client.post('/api/products/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(ProductModel.objects.get(name='Stickers').slug, 'stickers')

        payload['name'] = 'Broken'
        payload['options'] = [{'id': 'paper', 'type': 'select', 'options': []}]
        response = self.client.post('/api/products/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('options', response.data)

    def test_calculate_price(self):
        response = self.client.post(reverse('pricing-calculate'), {
            'product_slug': 'business-cards', 'configuration': {'paper': 'premium'},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], '5500.00')
        self.assertEqual(response.data['formatted_total'], '₦5,500.00')

    def test_calculate_price_with_quantity_tier(self):
        response = self.client.post(reverse('pricing-calculate'), {
            'product_slug': 'flyers', 'quantity': 500,
        }, format='json')
        self.assertEqual(response.data['total'], '45000.00')
        self.assertEqual(response.data['unit_price'], '90.00')

    def test_calculate_price_unknown_product(self):
        response = self.client.post(reverse('pricing-calculate'), {'product_slug': 'nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


# ====================================================================
# CONFIGURATOR
# ====================================================================

class ConfiguratorAPITestCase(StorefrontAPITestCase):
    url = '/api/products/business-cards/configurator/'

    def test_configure_and_confirm(self):
        """
        Scenario: the visitor picks premium paper and confirms; the configured
        card lands in the session cart at 5,500.
        """
        # ARRANGE
        response = self.client.get(self.url)
        self.assertEqual(response.data['current_step'], 1)
        self.assertEqual(response.data['breakdown']['total'], '5000.00')

        # ACT
        response = self.client.post(self.url, {'action': 'select', 'option_id': 'paper', 'value': 'premium'},
                                    format='json')
        self.assertEqual(response.data['configuration'], {'paper': 'premium'})
        response = self.client.post(self.url, {'action': 'confirm'}, format='json')

        # ASSERT
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['cart']['item_count'], 1)
        self.assertEqual(response.data['cart']['subtotal'], '5500.00')

    def test_get_resets_configuration(self):
        self.client.get(self.url)
        self.client.post(self.url, {'action': 'select', 'option_id': 'paper', 'value': 'premium'}, format='json')
        response = self.client.get(self.url)
        self.assertEqual(response.data['configuration'], {'paper': 'standard'})

    def test_invalid_transitions(self):
        self.client.get(self.url)
        response = self.client.post(self.url, {'action': 'next'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post(self.url, {'action': 'select', 'option_id': 'paper', 'value': 'vellum'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post(self.url, {'action': 'go_to'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


# ====================================================================
# CART
# ====================================================================

class CartAPITestCase(StorefrontAPITestCase):

    def test_add_item(self):
        # ACT
        response = self.add_card_to_cart(quantity=2)

        # ASSERT: two premium card packs at 5,500 each
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['item']['total_price'], '11000.00')
        self.assertEqual(response.data['cart']['item_count'], 1)
        self.assertEqual(response.data['cart']['subtotal'], '11000.00')
        self.assertEqual(response.data['cart']['shipping'], '5000.00')
        self.assertEqual(response.data['cart']['tax'], '825.00')
        self.assertEqual(response.data['cart']['total'], '16825.00')

    def test_added_quantity_costs_what_the_calculator_quotes(self):
        """
        Scenario: 500 flyers cost the same in the cart as on the price calculator.
        """
        # ARRANGE
        quote = self.client.post(reverse('pricing-calculate'), {
            'product_slug': 'flyers', 'quantity': 500,
        }, format='json').data

        # ACT
        response = self.client.post(reverse('cart-items'), {
            'product_slug': 'flyers', 'configuration': {}, 'quantity': 500,
        }, format='json')

        # ASSERT
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['item']['total_price'], quote['total'])
        self.assertEqual(response.data['item']['total_price'], '45000.00')
        self.assertEqual(response.data['item']['configuration'], {'quantity': '500'})

    def test_quantity_not_offered_is_rejected(self):
        response = self.client.post(reverse('cart-items'), {
            'product_slug': 'flyers', 'configuration': {}, 'quantity': 300,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_client_prices_are_ignored(self):
        payload = {'product_slug': 'business-cards', 'configuration': {'paper': 'premium'}, 'total_price': '1.00'}
        response = self.client.post(reverse('cart-items'), payload, format='json')
        self.assertEqual(response.data['item']['total_price'], '5500.00')

    def test_update_and_remove_item(self):
        item_id = self.add_card_to_cart(quantity=2).data['item']['id']
        url = reverse('cart-item-detail', args=[item_id])

        response = self.client.patch(url, {'quantity': 4}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['items'][0]['total_price'], '22000.00')

        response = self.client.delete(url)
        self.assertEqual(response.data['item_count'], 0)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_404_NOT_FOUND)

    def test_quantity_zero_removes_item(self):
        item_id = self.add_card_to_cart().data['item']['id']
        response = self.client.patch(reverse('cart-item-detail', args=[item_id]), {'quantity': 0}, format='json')
        self.assertEqual(response.data['item_count'], 0)

    def test_clear_cart(self):
        self.add_card_to_cart()
        self.add_card_to_cart(paper='standard')
        response = self.client.delete(reverse('cart'))
        self.assertEqual(response.data['item_count'], 0)
        self.assertEqual(response.data['subtotal'], '0.00')

    def test_cart_survives_between_requests(self):
        self.add_card_to_cart()
        response = self.client.get(reverse('cart'))
        self.assertEqual(response.data['item_count'], 1)

    def test_context_processor_without_session(self):
        self.assertEqual(cart_context(RequestFactory().get('/')), {})


# ====================================================================
# ACCOUNTS
# ====================================================================

class AuthAPITestCase(StorefrontAPITestCase):

    def test_register_token_and_me(self):
        response = self.client.post(reverse('register'), {
            'email': 'chi@example.com', 'password': 'a-long-passphrase-9', 'first_name': 'Chi',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertNotIn('password', response.data)

        response = self.client.post(reverse('token_obtain_pair'), {
            'email': 'chi@example.com', 'password': 'a-long-passphrase-9',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        response = self.client.get(reverse('me'))
        self.assertEqual(response.data['email'], 'chi@example.com')

    def test_register_duplicate_email(self):
        response = self.client.post(reverse('register'), {
            'email': 'ada@example.com', 'password': 'a-long-passphrase-9',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(reverse('register'), {
            'email': 'Ada@Example.com', 'password': 'a-long-passphrase-9',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data)

    def test_logout_always_clears_cart(self):
        """
        Scenario: logging out without a user still succeeds and empties the cart.
        """
        # ARRANGE
        self.add_card_to_cart()

        # ACT
        response = self.client.post(reverse('logout'), {'refresh': 'not-a-token'}, format='json')

        # ASSERT
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get(reverse('cart')).data['item_count'], 0)


# ====================================================================
# CHECKOUT, ORDERS AND PAYMENTS
# ====================================================================

class CheckoutAPITestCase(StorefrontAPITestCase):

    def test_checkout_requires_login(self):
        self.add_card_to_cart()
        response = self.checkout()
        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_checkout_with_empty_cart(self):
        self.client.force_authenticate(user=self.customer)
        response = self.checkout()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('message', response.data)

    def test_checkout_with_success(self):
        """
        Scenario: checkout creates an order awaiting payment, empties the cart
        and e-mails the customer.
        """
        # ACT
        order = self.place_order()

        # ASSERT
        self.assertEqual(order['status'], Order.AWAITING_PAYMENT)
        self.assertEqual(order['total'], '10912.50')
        self.assertEqual(order['items'][0]['configuration'], {'paper': 'premium'})
        self.assertEqual(self.client.get(reverse('cart')).data['item_count'], 0)
        self.assertEqual(len(mail.outbox), 1)

    def test_customer_orders(self):
        order = self.place_order()

        response = self.client.get(reverse('order-list'))
        self.assertEqual([o['order_number'] for o in response.data], [order['order_number']])

        self.client.force_authenticate(user=self.other_customer)
        response = self.client.get(reverse('order-detail', args=[order['id']]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.get(reverse('order-detail', args=[9999]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    @patch('quikprint.core.dependency_injection.PaystackGateway')
    def test_payment_initialize(self, gateway_class_mock):
        # ARRANGE
        order = self.place_order()
        gateway = Mock()
        gateway.initialize.side_effect = lambda order, email, reference: PaymentTransaction(
            reference=reference, status='pending', amount=order.total,
            authorization_url='https://checkout.paystack.com/abc', access_code='abc',
        )
        gateway_class_mock.return_value = gateway

        # ACT
        response = self.client.post(reverse('payment-initialize'), {'order_id': order['id']}, format='json')

        # ASSERT
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['authorization_url'], 'https://checkout.paystack.com/abc')
        self.assertEqual(OrderModel.objects.get(pk=order['id']).payment_reference, response.data['reference'])

    @override_settings(PAYSTACK_SECRET_KEY='sk_test_webhook')
    @patch('quikprint.infrastructure.gateways.requests.request')
    def test_webhook_marks_order_paid(self, request_mock):
        # ARRANGE
        order = self.place_order()
        OrderModel.objects.filter(pk=order['id']).update(payment_reference='REF-1')
        request_mock.return_value = Mock(**{
            'json.return_value': {'status': True, 'data': {'status': 'success', 'reference': 'REF-1',
                                                           'amount': 1091250}},
        })
        body = json.dumps({'event': 'charge.success', 'data': {'reference': 'REF-1'}}).encode()
        signature = hmac.new(b'sk_test_webhook', body, hashlib.sha512).hexdigest()

        # ACT
        self.client.force_authenticate(user=None)
        response = self.client.post(reverse('payment-webhook'), body, content_type='application/json',
                                    HTTP_X_PAYSTACK_SIGNATURE=signature)

        # ASSERT
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(OrderModel.objects.get(pk=order['id']).status, Order.PAID)

    @override_settings(PAYSTACK_SECRET_KEY='sk_test_webhook')
    def test_webhook_rejects_bad_signature(self):
        response = self.client.post(reverse('payment-webhook'), b'{"event": "charge.success"}',
                                    content_type='application/json', HTTP_X_PAYSTACK_SIGNATURE='forged')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @override_settings(PAYSTACK_SECRET_KEY='sk_test_webhook')
    def test_webhook_rejects_payloads_that_are_not_objects(self):
        for body in (b'[1, 2]', b'"charge.success"', b'{"event": "charge.success", "data": "REF-1"}'):
            signature = hmac.new(b'sk_test_webhook', body, hashlib.sha512).hexdigest()
            with self.subTest(body=body):
                response = self.client.post(reverse('payment-webhook'), body, content_type='application/json',
                                            HTTP_X_PAYSTACK_SIGNATURE=signature)
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
                self.assertIn('message', response.data)


# ====================================================================
# ARTWORK FILES
# ====================================================================

MEDIA_ROOT = tempfile.mkdtemp()


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class ArtworkAPITestCase(StorefrontAPITestCase):

    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        super().setUp()
        self.order = self.place_order()
        self.url = reverse('order-item-files', args=[self.order['items'][0]['id']])

    def upload(self, name='card.pdf', content=b'%PDF-1.4 artwork', content_type='application/pdf'):
        upload = SimpleUploadedFile(name, content, content_type=content_type)
        return self.client.post(self.url, {'file': upload}, format='multipart')

    def test_upload_and_list(self):
        """
        Scenario: the customer uploads a PDF for the line just ordered and sees it listed.
        """
        # ACT
        response = self.upload()

        # ASSERT
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['file_name'], 'card.pdf')
        self.assertEqual(response.data['content_type'], 'application/pdf')
        self.assertEqual(response.data['uploaded_by_id'], self.customer.id)
        self.assertTrue(response.data['url'].startswith('/media/artwork/'))

        files = self.client.get(self.url).data
        self.assertEqual([f['id'] for f in files], [response.data['id']])

    def test_upload_rejects_wrong_types(self):
        response = self.upload(name='card.exe')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('message', response.data)

        response = self.upload(name='card.pdf', content_type='application/x-msdownload')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.client.get(self.url).data, [])

    @override_settings(ARTWORK_MAX_UPLOAD_SIZE_MB=1)
    def test_upload_rejects_oversized_files(self):
        response = self.upload(name='poster.png', content=b'0' * (1024 * 1024 + 1), content_type='image/png')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'File too large. Maximum size is 1 MB.')

    def test_upload_without_file(self):
        response = self.client.post(self.url, {}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_files_are_private_to_the_order_owner(self):
        """
        Scenario: another customer can neither upload nor list; staff can list;
        unknown lines are 404.
        """
        # ARRANGE
        self.upload()

        # ACT and ASSERT
        self.client.force_authenticate(user=self.other_customer)
        self.assertEqual(self.upload().status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.get(self.url).status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.get(reverse('order-item-files', args=[9999]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        self.client.force_authenticate(user=self.admin)
        self.assertEqual(len(self.client.get(self.url).data), 1)

    def test_delete_file(self):
        # ARRANGE
        file_id = self.upload().data['id']
        detail_url = reverse('artwork-file-detail', args=[file_id])

        # ACT and ASSERT
        self.client.force_authenticate(user=self.other_customer)
        self.assertEqual(self.client.delete(detail_url).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.customer)
        self.assertEqual(self.client.get(detail_url).data['file_name'], 'card.pdf')
        self.assertEqual(self.client.delete(detail_url).status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.delete(detail_url).status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.get(self.url).data, [])

    def test_upload_requires_login(self):
        self.client.force_authenticate(user=None)
        self.assertIn(self.upload().status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))


# ====================================================================
# BACK-OFFICE
# ====================================================================

class AdminAPITestCase(StorefrontAPITestCase):

    def setUp(self):
        super().setUp()
        self.order = self.place_order()
        self.client.force_authenticate(user=self.admin)

    def test_customers_cannot_use_admin_api(self):
        self.client.force_authenticate(user=self.customer)
        self.assertEqual(self.client.get(reverse('admin-order-list')).status_code, status.HTTP_403_FORBIDDEN)

    def test_list_orders_by_status(self):
        response = self.client.get(reverse('admin-order-list'), {'status': Order.AWAITING_PAYMENT})
        self.assertEqual(len(response.data), 1)
        self.assertEqual(len(self.client.get(reverse('admin-order-list'), {'status': 'paid'}).data), 0)
        response = self.client.get(reverse('admin-order-list'), {'status': 'lost'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_status(self):
        """
        Scenario: the admin moves the order to printing; the change is recorded
        in the history and the customer is told.
        """
        # ARRANGE
        url = reverse('admin-order-status', args=[self.order['id']])
        mail.outbox.clear()

        # ACT
        response = self.client.put(url, {'status': 'printing', 'note': 'On the press'}, format='json')

        # ASSERT
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'printing')
        self.assertEqual(response.data['status_history'][-1]['note'], 'On the press')
        self.assertEqual(response.data['status_history'][-1]['created_by_id'], self.admin.id)
        self.assertEqual(len(mail.outbox), 1)

    def test_notes(self):
        url = reverse('admin-order-notes', args=[self.order['id']])
        response = self.client.post(url, {'note': 'Customer wants matte'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual([n['note'] for n in self.client.get(url).data], ['Customer wants matte'])

    def test_customers_dashboard_and_reports(self):
        customers = self.client.get(reverse('admin-customers')).data
        ada = next(c for c in customers if c['email'] == 'ada@example.com')
        self.assertEqual(ada['order_count'], 1)

        dashboard = self.client.get(reverse('admin-dashboard')).data
        self.assertEqual(dashboard['total_orders'], 1)
        self.assertEqual(dashboard['open_orders'], 1)
        self.assertEqual(dashboard['total_revenue'], '0.00')
        self.assertEqual(dashboard['total_products'], 2)

        by_status = self.client.get(reverse('admin-report-orders-by-status')).data
        self.assertEqual(by_status[Order.AWAITING_PAYMENT], 1)

        daily = self.client.get(reverse('admin-report-daily'), {'days': 3}).data
        self.assertEqual(len(daily), 3)
        self.assertEqual(daily[-1]['orders'], 1)
        self.assertEqual(self.client.get(reverse('admin-report-daily'), {'days': 'x'}).status_code,
                         status.HTTP_400_BAD_REQUEST)

    def test_weekly_report(self):
        weekly = self.client.get(reverse('admin-report-weekly'), {'weeks': 4}).data
        self.assertEqual(len(weekly), 4)
        self.assertEqual(weekly[-1]['orders'], 1)
        self.assertEqual(weekly[-1]['revenue'], '10912.50')
        self.assertEqual(weekly[-1]['average_order_value'], '10912.50')
        self.assertEqual(weekly[0]['average_order_value'], '0.00')

        for weeks in ('x', 0):
            response = self.client.get(reverse('admin-report-weekly'), {'weeks': weeks})
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
