import hashlib
import hmac
import os
import shutil
import tempfile
from datetime import timedelta
from decimal import Decimal
from unittest.mock import Mock, patch

import requests
from django.contrib.auth import get_user_model
from django.core import mail
from django.core.exceptions import ValidationError
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.test import SimpleTestCase, TestCase, override_settings
from django.utils import timezone

from quikprint.catalog.models import Category as CategoryModel, Product as ProductModel, PricingRule, QuantityTier
from quikprint.core.entities import Order, OrderItem, OrderStatusChange, ShippingAddress
from quikprint.core.exceptions import InvalidDataError, OrderNotFoundError, PaymentFailedError
from quikprint.orders.models import Order as OrderModel, OrderItem as OrderItemModel, OrderItemFile as OrderItemFileModel
from quikprint.infrastructure.email_service import DjangoEmailService
from quikprint.infrastructure.gateways import PaystackGateway
from quikprint.infrastructure.mappers import UserMapper, option_to_dict, parse_options
from quikprint.infrastructure.repositories import (
    ArtworkRepositoryDjango,
    CategoryRepositoryDjango,
    OrderRepositoryDjango,
    ProductRepositoryDjango,
    UserRepositoryDjango,
)

PAPER_OPTION = {
    'id': 'paper',
    'name': 'Paper',
    'type': 'select',
    'options': [
        {'value': 'standard', 'label': 'Standard', 'priceModifier': 0},
        {'value': 'premium', 'label': 'Premium', 'priceModifier': 500},
    ],
}


class OptionParsingTestCase(SimpleTestCase):

    def test_parse_stored_json(self):
        options = parse_options([PAPER_OPTION, {'id': 'width', 'name': 'Width', 'type': 'dimension',
                                                'min': 1, 'max': '20', 'unit': 'ft'}])

        self.assertEqual(options[0].find_choice('premium').price_modifier, Decimal('500'))
        self.assertEqual(options[1].max, Decimal('20'))
        self.assertEqual(option_to_dict(options[0]), PAPER_OPTION)

    def test_accepts_choices_key(self):
        option = parse_options([{'id': 'finish', 'type': 'radio',
                                 'choices': [{'value': 'gloss', 'price_modifier': '250.50'}]}])[0]
        self.assertEqual(option.choices[0].label, 'gloss')
        self.assertEqual(option.choices[0].price_modifier, Decimal('250.50'))

    def test_rejects_invalid_definitions(self):
        with self.assertRaises(InvalidDataError):
            parse_options({'id': 'paper'})
        with self.assertRaises(InvalidDataError):
            parse_options([PAPER_OPTION, PAPER_OPTION])
        with self.assertRaises(InvalidDataError):
            parse_options([{'id': 'paper', 'type': 'select', 'options': []}])
        with self.assertRaises(InvalidDataError):
            parse_options([{'id': 'size', 'type': 'slider'}])


class CatalogRepositoryTestCase(TestCase):

    def setUp(self):
        self.repository = ProductRepositoryDjango()
        self.category = CategoryModel.objects.create(name='Business Cards')
        self.product = ProductModel.objects.create(
            category=self.category,
            name='Premium Business Cards',
            short_description='Thick cards with a velvet finish',
            base_price=Decimal('5000.00'),
            options=[PAPER_OPTION],
        )
        QuantityTier.objects.create(product=self.product, min_qty=500, max_qty=1000, price=Decimal('9000'))
        PricingRule.objects.create(product=self.product, rule_type='setup_fee', value=Decimal('1000'))
        ProductModel.objects.create(name='Retired Cards', base_price=Decimal('100'), is_active=False)

    def test_get_by_slug(self):
        """
        Scenario: the repository returns the product with its options, tiers and rules.
        """
        # ACT
        product = self.repository.get_by_slug('premium-business-cards')

        # ASSERT
        self.assertEqual(product.id, str(self.product.id))
        self.assertEqual(product.category_slug, 'business-cards')
        self.assertEqual(product.options[0].id, 'paper')
        self.assertEqual(product.quantity_tiers[0].price, Decimal('9000'))
        self.assertEqual(product.get_rule('setup_fee').value, Decimal('1000'))

    def test_get_by_slug_not_found(self):
        self.assertIsNone(self.repository.get_by_slug('missing'))

    def test_search_only_active_products(self):
        self.assertEqual([p.slug for p in self.repository.search()], ['premium-business-cards'])
        self.assertEqual(len(self.repository.search(search='velvet')), 1)
        self.assertEqual(len(self.repository.search(search='retired')), 0)
        self.assertEqual(len(self.repository.search(category_slug='flyers')), 0)
        self.assertEqual(self.repository.count(), 1)

    def test_categories_with_product_count(self):
        categories = CategoryRepositoryDjango().list_all()
        self.assertEqual(len(categories), 1)
        self.assertEqual(categories[0].product_count, 1)

    def test_model_validates_options(self):
        self.product.options = [{'id': 'paper', 'type': 'select', 'options': []}]
        with self.assertRaises(ValidationError):
            self.product.full_clean()


class OrderRepositoryTestCase(TestCase):

    def setUp(self):
        self.repository = OrderRepositoryDjango()
        self.user_model = get_user_model().objects.create_user(
            email='ada@example.com', password='s3cret-pass', first_name='Ada', last_name='Obi'
        )
        self.admin_model = get_user_model().objects.create_superuser(email='admin@example.com', password='admin')
        self.product = ProductModel.objects.create(name='Flyers', base_price=Decimal('20000'))

    def make_order(self, total='10912.50'):
        return Order(
            user=UserMapper.to_entity(self.user_model),
            items=[OrderItem(
                product_id=str(self.product.id),
                product_slug='flyers',
                product_name='Flyers',
                quantity=2,
                unit_price=Decimal('2750.00'),
                total_price=Decimal('5500.00'),
                configuration={'paper': 'premium', 'width': Decimal('2.5')},
            )],
            status=Order.AWAITING_PAYMENT,
            subtotal=Decimal('5500.00'),
            shipping=Decimal('5000.00'),
            tax=Decimal('412.50'),
            total=Decimal(total),
            shipping_address=ShippingAddress(name='Ada Obi', street='1 Marina', city='Lagos', state='Lagos'),
            status_history=[OrderStatusChange(status=Order.AWAITING_PAYMENT, note='Order placed')],
        )

    def test_create_order(self):
        """
        Scenario: the order, its items and its first history entry are stored together.
        """
        # ACT
        order = self.repository.create(self.make_order())

        # ASSERT
        self.assertRegex(order.order_number, r'^QP-\d{8}-[0-9A-F]{6}$')
        self.assertEqual(order.total, Decimal('10912.50'))
        self.assertEqual(order.items[0].product_id, str(self.product.id))
        self.assertEqual(order.items[0].configuration, {'paper': 'premium', 'width': '2.5'})
        self.assertEqual([change.status for change in order.status_history], [Order.AWAITING_PAYMENT])
        self.assertEqual(order.shipping_address.country, 'Nigeria')

    def test_create_order_without_items_fails(self):
        order = self.make_order()
        order.items = []
        with self.assertRaises(InvalidDataError):
            self.repository.create(order)

    def test_update_status_records_history(self):
        order = self.repository.create(self.make_order())

        updated = self.repository.update_status(order.id, Order.PAID, note='Paystack', changed_by_id=self.admin_model.id)

        self.assertEqual(updated.status, Order.PAID)
        self.assertEqual(updated.status_history[-1].note, 'Paystack')
        self.assertEqual(updated.status_history[-1].created_by_id, self.admin_model.id)

    def test_update_status_unknown_order(self):
        with self.assertRaises(OrderNotFoundError):
            self.repository.update_status(999, Order.PAID)

    def test_payment_reference_lookup(self):
        order = self.repository.create(self.make_order())
        self.repository.set_payment_reference(order.id, 'QP-REF-1')
        self.assertEqual(self.repository.get_by_payment_reference('QP-REF-1').id, order.id)
        self.assertIsNone(self.repository.get_by_payment_reference('nope'))

    def test_notes(self):
        order = self.repository.create(self.make_order())
        self.repository.add_note(order.id, 'Customer called', created_by_id=self.admin_model.id)
        notes = self.repository.list_notes(order.id)
        self.assertEqual([note.note for note in notes], ['Customer called'])

    def test_reports(self):
        # ARRANGE
        paid = self.repository.create(self.make_order(total='1000.00'))
        self.repository.update_status(paid.id, Order.PAID)
        self.repository.create(self.make_order(total='2000.00'))
        cancelled = self.repository.create(self.make_order(total='4000.00'))
        self.repository.update_status(cancelled.id, Order.CANCELLED)

        # ACT
        counts = self.repository.count_by_status()
        sales = self.repository.daily_sales(timezone.localdate() - timedelta(days=1))

        # ASSERT
        self.assertEqual(counts, {Order.PAID: 1, Order.AWAITING_PAYMENT: 1, Order.CANCELLED: 1})
        self.assertEqual(self.repository.revenue([Order.PAID]), Decimal('1000.00'))
        self.assertEqual(sum(row['orders'] for row in sales), 2)
        self.assertEqual(sum(row['revenue'] for row in sales), Decimal('3000.00'))

    def test_list_customers(self):
        self.repository.create(self.make_order(total='1000.00'))
        customers = UserRepositoryDjango().list_customers()

        self.assertEqual(len(customers), 1)
        self.assertEqual(customers[0]['user'].email, 'ada@example.com')
        self.assertEqual(customers[0]['order_count'], 1)
        self.assertEqual(customers[0]['total_spent'], Decimal('1000.00'))


MEDIA_ROOT = tempfile.mkdtemp()


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class ArtworkRepositoryTestCase(TestCase):

    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        self.repository = ArtworkRepositoryDjango()
        user = get_user_model().objects.create_user(email='ada@example.com', password='s3cret-pass')
        order = OrderModel.objects.create(
            user=user, order_number='QP-20260105-ABC123', total=Decimal('5500.00'),
            shipping_name='Ada Obi', shipping_street='1 Marina', shipping_city='Lagos', shipping_state='Lagos',
        )
        self.item = OrderItemModel.objects.create(
            order=order, product_name='Business Cards', quantity=100,
            unit_price=Decimal('55.00'), total_price=Decimal('5500.00'),
        )
        self.user = user

    def test_item_owner(self):
        self.assertEqual(self.repository.get_item_owner_id(self.item.id), self.user.id)
        self.assertIsNone(self.repository.get_item_owner_id(999))

    def test_create_list_and_delete(self):
        """
        Scenario: the upload lands on storage under a generated name, keeps the
        customer's file name, and disappears from storage when deleted.
        """
        # ARRANGE
        upload = SimpleUploadedFile('My Card.PDF', b'%PDF-1.4 artwork', content_type='application/pdf')

        # ACT
        artwork = self.repository.create(
            self.item.id, upload, 'My Card.PDF', 'application/pdf', upload.size, uploaded_by_id=self.user.id,
        )

        # ASSERT
        stored = OrderItemFileModel.objects.get(pk=artwork.id)
        self.assertEqual(artwork.file_name, 'My Card.PDF')
        self.assertEqual(artwork.file_size, 16)
        self.assertEqual(artwork.uploaded_by_id, self.user.id)
        self.assertRegex(stored.file.name, r'^artwork/\d{4}/\d{2}/\d{2}/[0-9a-f]{32}\.pdf$')
        self.assertTrue(artwork.url.startswith('/media/artwork/'))
        self.assertTrue(os.path.exists(stored.file.path))
        self.assertEqual([f.id for f in self.repository.list_by_item(self.item.id)], [artwork.id])

        # ACT
        path = stored.file.path
        self.repository.delete(artwork.id)

        # ASSERT
        self.assertFalse(os.path.exists(path))
        self.assertIsNone(self.repository.get_by_id(artwork.id))
        self.assertEqual(self.repository.list_by_item(self.item.id), [])


class PaystackGatewayTestCase(SimpleTestCase):

    def setUp(self):
        self.gateway = PaystackGateway(secret_key='sk_test_123', callback_url='https://shop.test/paid')
        self.order = Order(
            id=7, order_number='QP-20260101-ABC123', user=None, items=[], status=Order.AWAITING_PAYMENT,
            subtotal=Decimal('0'), shipping=Decimal('0'), tax=Decimal('0'), total=Decimal('10912.50'),
            shipping_address=ShippingAddress(name='', street='', city='', state=''),
        )

    def response(self, payload):
        response = Mock()
        response.json.return_value = payload
        response.raise_for_status.return_value = None
        return response

    @patch('quikprint.infrastructure.gateways.requests.request')
    def test_initialize_sends_kobo(self, request_mock):
        request_mock.return_value = self.response({
            'status': True,
            'data': {'authorization_url': 'https://checkout.paystack.com/x', 'access_code': 'x', 'reference': 'REF'},
        })

        transaction = self.gateway.initialize(self.order, 'ada@example.com', 'REF')

        payload = request_mock.call_args.kwargs['json']
        self.assertEqual(payload['amount'], 1091250)
        self.assertEqual(payload['callback_url'], 'https://shop.test/paid')
        self.assertEqual(request_mock.call_args.kwargs['headers']['Authorization'], 'Bearer sk_test_123')
        self.assertEqual(transaction.authorization_url, 'https://checkout.paystack.com/x')

    @patch('quikprint.infrastructure.gateways.requests.request')
    def test_verify_converts_amount(self, request_mock):
        request_mock.return_value = self.response({
            'status': True, 'data': {'status': 'success', 'reference': 'REF', 'amount': 1091250},
        })
        transaction = self.gateway.verify('REF')
        self.assertEqual(transaction.status, 'success')
        self.assertEqual(transaction.amount, Decimal('10912.50'))

    @patch('quikprint.infrastructure.gateways.requests.request')
    def test_network_error_becomes_payment_failure(self, request_mock):
        request_mock.side_effect = requests.exceptions.ConnectionError('down')
        with self.assertRaises(PaymentFailedError):
            self.gateway.verify('REF')

    @patch('quikprint.infrastructure.gateways.requests.request')
    def test_provider_rejection(self, request_mock):
        request_mock.return_value = self.response({'status': False, 'message': 'Invalid key'})
        with self.assertRaises(PaymentFailedError):
            self.gateway.verify('REF')

    def test_signature(self):
        body = b'{"event": "charge.success"}'
        signature = hmac.new(b'sk_test_123', body, hashlib.sha512).hexdigest()
        self.assertTrue(self.gateway.is_valid_signature(body, signature))
        self.assertFalse(self.gateway.is_valid_signature(body, 'forged'))
        self.assertFalse(self.gateway.is_valid_signature(body, ''))


class EmailServiceTestCase(TestCase):

    def test_confirmation_lists_items_and_totals(self):
        user = get_user_model().objects.create_user(email='ada@example.com', password='x', first_name='Ada')
        order = Order(
            order_number='QP-20260101-ABC123', user=UserMapper.to_entity(user), status=Order.AWAITING_PAYMENT,
            items=[OrderItem(product_name='Flyers', quantity=2, unit_price=Decimal('2750'),
                             total_price=Decimal('5500'))],
            subtotal=Decimal('5500'), shipping=Decimal('5000'), tax=Decimal('412.50'), total=Decimal('10912.50'),
            shipping_address=ShippingAddress(name='Ada', street='1 Marina', city='Lagos', state='Lagos'),
        )

        DjangoEmailService(from_email='orders@quikprint.test').send_order_confirmation(order)

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['ada@example.com'])
        self.assertIn('₦10,912.50', mail.outbox[0].body)


class LoadInitialDataTestCase(TestCase):

    def test_seed_is_idempotent(self):
        call_command('load_initial_data', verbosity=0)
        call_command('load_initial_data', verbosity=0)

        self.assertEqual(CategoryModel.objects.count(), 4)
        self.assertEqual(ProductModel.objects.count(), 4)
        self.assertEqual(OrderModel.objects.count(), 0)
        self.assertTrue(get_user_model().objects.filter(is_staff=True).exists())

        banner = ProductRepositoryDjango().get_by_slug('flex-banner')
        self.assertTrue(banner.has_area_dimensions)
