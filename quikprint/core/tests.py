# quikprint/core/tests.py

import unittest
from datetime import date
from decimal import Decimal
from unittest.mock import Mock

from quikprint.core.cart import Cart
from quikprint.core.configurator import ProductConfigurator
from quikprint.core.entities import (
    Product, ProductOption, OptionChoice, QuantityTier, PricingRule, User, Order, OrderItem,
    ShippingAddress, PaymentTransaction, ArtworkFile,
)
from quikprint.core.exceptions import (
    ArtworkNotFoundError,
    CartEmptyError,
    CartItemNotFoundError,
    InvalidDataError,
    InvalidStatusError,
    InvalidStepError,
    OrderAccessDeniedError,
    OrderItemNotFoundError,
    OrderNotFoundError,
    PaymentFailedError,
    ProductNotFoundError,
)
from quikprint.core.money import format_naira, from_kobo, parse_decimal, round_money, to_kobo
from quikprint.core.pricing import PricingEngine, compute_price
from quikprint.core.totals import TotalsPolicy, calculate_order_totals
from quikprint.core.use_cases import (
    AdminOrdersUseCase,
    ArtworkUseCase,
    CalculatePriceUseCase,
    CreateOrderUseCase,
    CustomerOrdersUseCase,
    ManageCartUseCase,
    PaymentUseCase,
    ReportsUseCase,
)


# ====================================================================
# FIXTURES
# ====================================================================

def choice_option(option_id, *choices, option_type=ProductOption.SELECT):
    return ProductOption(
        id=option_id,
        name=option_id.title(),
        type=option_type,
        choices=[OptionChoice(value=value, label=value.title(), price_modifier=modifier)
                 for value, modifier in choices],
    )


def dimension_option(option_id, minimum='1', maximum='50'):
    return ProductOption(id=option_id, name=option_id.title(), type=ProductOption.DIMENSION,
                         min=Decimal(minimum), max=Decimal(maximum), unit='ft')


def business_card():
    """5,000 base, premium paper +500."""
    return Product(
        id='card-1',
        name='Business Cards',
        slug='business-cards',
        base_price=Decimal('5000'),
        options=[choice_option('paper', ('standard', Decimal('0')), ('premium', Decimal('500')))],
    )


def banner(**kwargs):
    return Product(
        id='banner-1',
        name='Flex Banner',
        slug='flex-banner',
        base_price=Decimal('100'),
        options=[
            dimension_option('width'),
            dimension_option('height'),
            choice_option('finishing', ('none', Decimal('0')), ('eyelets', Decimal('1500')),
                          option_type=ProductOption.RADIO),
        ],
        **kwargs
    )


def flyer():
    return Product(
        id='flyer-1',
        name='Flyers',
        slug='flyers',
        base_price=Decimal('20000'),
        min_quantity=100,
        options=[
            choice_option('size', ('a5', Decimal('0')), ('a4', Decimal('5000'))),
            ProductOption(id='quantity', name='Quantity', type=ProductOption.QUANTITY,
                          min=Decimal('100'), max=Decimal('10000'), step=Decimal('50')),
        ],
        quantity_tiers=[
            QuantityTier(min_qty=100, max_qty=499, price=Decimal('20000')),
            QuantityTier(min_qty=500, max_qty=999, price=Decimal('45000')),
        ],
        pricing_rules=[PricingRule(rule_type=PricingRule.RUSH_FEE, value=Decimal('3000'))],
    )


def make_order(**kwargs):
    values = dict(
        id=10,
        order_number='QP-20260101-ABC123',
        user=User(id=1, email='ada@example.com', name='Ada'),
        items=[],
        status=Order.AWAITING_PAYMENT,
        subtotal=Decimal('5500.00'),
        shipping=Decimal('5000.00'),
        tax=Decimal('412.50'),
        total=Decimal('10912.50'),
        shipping_address=ShippingAddress(name='Ada', street='1 Marina', city='Lagos', state='Lagos'),
    )
    values.update(kwargs)
    return Order(**values)


# ====================================================================
# MONEY
# ====================================================================

class TestMoney(unittest.TestCase):

    def test_round_money_is_half_up(self):
        self.assertEqual(round_money('2.345'), Decimal('2.35'))
        self.assertEqual(round_money(None), Decimal('0.00'))

    def test_parse_decimal_rejects_booleans_and_text(self):
        self.assertIsNone(parse_decimal(True))
        self.assertIsNone(parse_decimal('wide'))
        self.assertEqual(parse_decimal(' 250 '), Decimal('250'))

    def test_kobo_conversion(self):
        self.assertEqual(to_kobo(Decimal('10912.50')), 1091250)
        self.assertEqual(from_kobo(1091250), Decimal('10912.50'))

    def test_format_naira(self):
        self.assertEqual(format_naira(5500), '₦5,500.00')
        self.assertEqual(format_naira(Decimal('1234.5'), show_decimals=False), '₦1,235')


# ====================================================================
# PRICING ENGINE
# ====================================================================

class TestPricingEngine(unittest.TestCase):

    def setUp(self):
        self.engine = PricingEngine()

    def test_additive_price_is_base_plus_modifiers(self):
        """
        Scenario: 5,000 card with premium paper (+500) costs 5,500.
        """
        # ACT
        price = compute_price(business_card(), {'paper': 'premium'})

        # ASSERT
        self.assertEqual(price, Decimal('5500.00'))

    def test_unknown_choice_adds_nothing(self):
        price = self.engine.compute_price(business_card(), {'paper': 'gold-leaf'})
        self.assertEqual(price, Decimal('5000.00'))

    def test_auto_strategy_prices_area_and_ignores_modifiers(self):
        """
        Scenario: a product with width/height and no explicit strategy is
        priced per square foot; additive options do not contribute.
        """
        # ARRANGE
        product = banner()

        # ACT
        breakdown = self.engine.quote(product, {'width': 3, 'height': '2', 'finishing': 'eyelets'})

        # ASSERT
        self.assertEqual(breakdown.strategy, 'area')
        self.assertEqual(breakdown.dimensional_cost, Decimal('600'))
        self.assertEqual(breakdown.total, Decimal('600.00'))

    def test_area_with_options_adds_modifiers_to_area(self):
        product = banner(pricing_strategy='area_with_options')
        price = self.engine.compute_price(product, {'width': 3, 'height': 2, 'finishing': 'eyelets'})
        self.assertEqual(price, Decimal('2100.00'))

    def test_price_does_not_depend_on_configuration_order(self):
        product = banner(pricing_strategy='area_with_options')
        forward = {'width': 4, 'height': 5, 'finishing': 'eyelets'}
        backward = {'finishing': 'eyelets', 'height': 5, 'width': 4}
        self.assertEqual(self.engine.compute_price(product, forward), self.engine.compute_price(product, backward))

    def test_minimum_charge_and_setup_fee(self):
        # ARRANGE
        product = banner(pricing_rules=[
            PricingRule(rule_type=PricingRule.MINIMUM_CHARGE, value=Decimal('5000')),
            PricingRule(rule_type=PricingRule.SETUP_FEE, value=Decimal('1000')),
        ])

        # ACT
        breakdown = self.engine.quote(product, {'width': 2, 'height': 2})

        # ASSERT: 400 is floored to 5,000, then the setup fee is added
        self.assertEqual(breakdown.dimensional_cost, Decimal('5000'))
        self.assertEqual(breakdown.setup_fee, Decimal('1000'))
        self.assertEqual(breakdown.total, Decimal('6000.00'))

    def test_quantity_tier_replaces_base_price(self):
        breakdown = self.engine.quote(flyer(), {'size': 'a4', 'quantity': 500})
        self.assertEqual(breakdown.quantity, 500)
        self.assertEqual(breakdown.quantity_price, Decimal('45000'))
        self.assertEqual(breakdown.total, Decimal('50000.00'))
        self.assertEqual(breakdown.unit_price, Decimal('100.00'))

    def test_rush_fee_only_when_requested(self):
        product = flyer()
        normal = self.engine.compute_price(product, {'size': 'a5', 'quantity': 100})
        rushed = self.engine.compute_price(product, {'size': 'a5', 'quantity': 100, 'rush': 'yes'})
        self.assertEqual(rushed - normal, Decimal('3000'))

    def test_flat_strategy_ignores_options(self):
        product = business_card()
        product.pricing_strategy = 'flat'
        self.assertEqual(self.engine.compute_price(product, {'paper': 'premium'}), Decimal('5000.00'))

    def test_negative_total_is_clamped_and_flagged(self):
        """
        Scenario: a discount modifier larger than the base price gives 0, not a negative price.
        """
        # ARRANGE
        product = Product(
            name='Promo', slug='promo', base_price=Decimal('1000'),
            options=[choice_option('coupon', ('none', Decimal('0')), ('big', Decimal('-2500')))],
        )

        # ACT
        with self.assertLogs('quikprint.core.pricing', level='WARNING'):
            breakdown = self.engine.quote(product, {'coupon': 'big'})

        # ASSERT
        self.assertTrue(breakdown.clamped)
        self.assertEqual(breakdown.total, Decimal('0.00'))


# ====================================================================
# CART AND TOTALS
# ====================================================================

class TestCart(unittest.TestCase):

    def setUp(self):
        self.cart = Cart()
        self.product = business_card()

    def test_add_item_keeps_configured_total(self):
        """
        Scenario: the 5,500 card added with quantity 2 gives one line and a
        5,500 subtotal (the configured price is not multiplied again).
        """
        # ACT
        self.cart.add_item(self.product, 2, {'paper': 'premium'}, Decimal('5500'))

        # ASSERT
        self.assertEqual(self.cart.item_count, 1)
        self.assertEqual(self.cart.subtotal, Decimal('5500.00'))

    def test_add_then_remove_restores_cart(self):
        existing = self.cart.add_item(self.product, 1, {'paper': 'standard'}, Decimal('5000'))
        added = self.cart.add_item(self.product, 1, {'paper': 'premium'}, Decimal('5500'))

        self.cart.remove_item(added.id)

        self.assertEqual([item.id for item in self.cart.items], [existing.id])
        self.assertEqual(self.cart.subtotal, Decimal('5000.00'))

    def test_line_ids_are_unique(self):
        first = self.cart.add_item(self.product, 1, {}, Decimal('5000'))
        second = self.cart.add_item(self.product, 1, {}, Decimal('5000'))
        self.assertNotEqual(first.id, second.id)

    def test_update_quantity_rescales_total(self):
        item = self.cart.add_item(self.product, 100, {}, Decimal('5000'))

        self.cart.update_quantity(item.id, 250)

        self.assertEqual(item.unit_price, Decimal('50.00'))
        self.assertEqual(item.total_price, Decimal('12500.00'))

    def test_update_quantity_keeps_configuration_in_step(self):
        """
        Scenario: a flyer line goes from 100 to 500 pieces; the quantity recorded
        in its configuration follows, so the order never carries two quantities.
        """
        # ARRANGE
        item = self.cart.add_item(flyer(), 100, {'size': 'a5', 'quantity': 100}, Decimal('20000'))

        # ACT
        self.cart.update_quantity(item.id, 500)

        # ASSERT
        self.assertEqual(item.quantity, 500)
        self.assertEqual(item.configuration['quantity'], 500)
        self.assertEqual(item.configuration['size'], 'a5')

    def test_update_quantity_on_select_quantity_option(self):
        product = Product(
            name='Posters', slug='posters', base_price=Decimal('8000'),
            options=[choice_option('quantity', ('10', Decimal('0')), ('50', Decimal('0')))],
        )
        item = self.cart.add_item(product, 10, {'quantity': '10'}, Decimal('8000'))

        self.cart.update_quantity(item.id, 50)

        self.assertEqual(item.configuration, {'quantity': '50'})

    def test_update_quantity_without_quantity_option_leaves_configuration(self):
        item = self.cart.add_item(self.product, 1, {'paper': 'premium'}, Decimal('5500'))
        self.cart.update_quantity(item.id, 3)
        self.assertEqual(item.configuration, {'paper': 'premium'})

    def test_update_quantity_to_zero_removes_line(self):
        item = self.cart.add_item(self.product, 1, {}, Decimal('5000'))
        self.assertIsNone(self.cart.update_quantity(item.id, 0))
        self.assertTrue(self.cart.is_empty())

    def test_clear(self):
        self.cart.add_item(self.product, 1, {}, Decimal('5000'))
        self.cart.clear()
        self.assertEqual(self.cart.item_count, 0)
        self.assertEqual(self.cart.subtotal, Decimal('0'))

    def test_add_item_rejects_zero_quantity(self):
        with self.assertRaises(InvalidDataError):
            self.cart.add_item(self.product, 0, {}, Decimal('5000'))

    def test_cart_line_is_a_snapshot(self):
        item = self.cart.add_item(self.product, 1, {}, Decimal('5000'))
        self.product.name = 'Renamed'
        self.assertEqual(item.product.name, 'Business Cards')


class TestOrderTotals(unittest.TestCase):

    def test_free_shipping_above_threshold(self):
        totals = calculate_order_totals(Decimal('60000'))
        self.assertEqual(totals.shipping, Decimal('0.00'))
        self.assertEqual(totals.tax, Decimal('4500.00'))
        self.assertEqual(totals.total, Decimal('64500.00'))
        self.assertEqual(totals.amount_to_free_shipping, Decimal('0.00'))

    def test_flat_shipping_below_threshold(self):
        totals = calculate_order_totals(Decimal('40000'))
        self.assertEqual(totals.shipping, Decimal('5000.00'))
        self.assertEqual(totals.tax, Decimal('3000.00'))
        self.assertEqual(totals.total, Decimal('48000.00'))
        self.assertEqual(totals.amount_to_free_shipping, Decimal('10000.00'))

    def test_threshold_itself_still_pays_shipping(self):
        self.assertEqual(calculate_order_totals(Decimal('50000')).shipping, Decimal('5000.00'))

    def test_policy_uses_its_own_parameters(self):
        policy = TotalsPolicy(free_shipping_threshold=Decimal('1000'), flat_shipping_fee=Decimal('250'),
                              tax_rate=Decimal('0'))
        self.assertEqual(policy.calculate(Decimal('800')).total, Decimal('1050.00'))


# ====================================================================
# CONFIGURATOR
# ====================================================================

class TestProductConfigurator(unittest.TestCase):

    def setUp(self):
        self.configurator = ProductConfigurator(flyer())

    def test_starts_on_first_step_with_defaults(self):
        self.assertEqual(self.configurator.current_step, 1)
        self.assertEqual(self.configurator.total_steps, 2)
        self.assertEqual(self.configurator.configuration, {'size': 'a5', 'quantity': 100})
        self.assertFalse(self.configurator.can_go_previous)
        self.assertEqual(self.configurator.price, Decimal('20000.00'))

    def test_navigation_bounds(self):
        with self.assertRaises(InvalidStepError):
            self.configurator.previous()
        self.assertEqual(self.configurator.next(), 2)
        self.assertTrue(self.configurator.is_last_step)
        with self.assertRaises(InvalidStepError):
            self.configurator.next()
        with self.assertRaises(InvalidStepError):
            self.configurator.go_to(3)
        self.assertEqual(self.configurator.go_to(1), 1)

    def test_select_validates_values(self):
        with self.assertRaises(InvalidDataError):
            self.configurator.select('size', 'a0')
        with self.assertRaises(InvalidDataError):
            self.configurator.select('quantity', 50)
        with self.assertRaises(InvalidDataError):
            self.configurator.select('finish', 'gloss')

        self.configurator.select('quantity', '500')
        self.assertEqual(self.configurator.quantity, 500)

    def test_select_follows_option_step(self):
        """
        Scenario: flyers go up in steps of 50 from 100, so 137 is refused and 150 is taken.
        """
        # ACT and ASSERT
        with self.assertRaises(InvalidDataError):
            self.configurator.select('quantity', 137)
        self.assertEqual(self.configurator.quantity, 100)

        self.configurator.select('quantity', 150)
        self.assertEqual(self.configurator.quantity, 150)

    def test_confirm_only_on_last_step(self):
        """
        Scenario: confirming before the last step fails; on the last step the
        configured product lands in the cart at the current price.
        """
        # ARRANGE
        cart = Cart()
        self.configurator.select('size', 'a4')

        # ACT and ASSERT
        with self.assertRaises(InvalidStepError):
            self.configurator.confirm(cart)
        self.configurator.next()
        item = self.configurator.confirm(cart)

        self.assertEqual(item.quantity, 100)
        self.assertEqual(item.total_price, Decimal('25000.00'))
        self.assertEqual(cart.item_count, 1)

    def test_state_round_trip(self):
        self.configurator.select('quantity', 500)
        self.configurator.next()

        restored = ProductConfigurator.from_state(self.configurator.product, self.configurator.to_state())

        self.assertEqual(restored.current_step, 2)
        self.assertEqual(restored.configuration, self.configurator.configuration)

    def test_stale_state_starts_over(self):
        state = {'product_id': 'flyer-1', 'current_step': 2, 'configuration': {'size': 'retired-size'}}
        restored = ProductConfigurator.from_state(flyer(), state)
        self.assertEqual(restored.current_step, 1)
        self.assertEqual(restored.configuration['size'], 'a5')

    def test_product_without_options_is_already_on_last_step(self):
        configurator = ProductConfigurator(Product(name='Sticker', slug='sticker', base_price=Decimal('300')))
        self.assertTrue(configurator.is_last_step)
        self.assertIsNone(configurator.current_option)


# ====================================================================
# USE CASES
# ====================================================================

class TestCalculatePriceUseCase(unittest.TestCase):

    def setUp(self):
        self.product_repo_mock = Mock()
        self.use_case = CalculatePriceUseCase(product_repo=self.product_repo_mock)

    def test_quote_with_quantity_override(self):
        self.product_repo_mock.get_by_slug.return_value = flyer()

        breakdown = self.use_case.execute('flyers', {'size': 'a5'}, quantity=600)

        self.assertEqual(breakdown.quantity, 600)
        self.assertEqual(breakdown.total, Decimal('45000.00'))

    def test_unknown_product(self):
        self.product_repo_mock.get_by_slug.return_value = None
        with self.assertRaises(ProductNotFoundError):
            self.use_case.execute('missing', {})


class TestManageCartUseCase(unittest.TestCase):

    def setUp(self):
        self.product_repo_mock = Mock()
        self.use_case = ManageCartUseCase(product_repo=self.product_repo_mock)
        self.cart = Cart()

    def test_add_product_prices_on_the_server(self):
        """
        Scenario: adding a product computes its price from the catalog definition.
        """
        # ARRANGE
        self.product_repo_mock.get_by_slug.return_value = business_card()

        # ACT
        item = self.use_case.add_product(self.cart, 'business-cards', {'paper': 'premium'})

        # ASSERT
        self.assertEqual(item.total_price, Decimal('5500.00'))
        summary = self.use_case.summary(self.cart)
        self.assertEqual(summary.item_count, 1)
        self.assertEqual(summary.totals.shipping, Decimal('5000.00'))
        self.assertEqual(summary.totals.tax, Decimal('412.50'))

    def test_add_product_with_quantity_is_priced_for_that_quantity(self):
        """
        Scenario: 500 A4 flyers go in the cart at the 500-999 tier, the same
        50,000 the price calculator quotes for them.
        """
        # ARRANGE
        self.product_repo_mock.get_by_slug.return_value = flyer()
        quote = CalculatePriceUseCase(self.product_repo_mock).execute('flyers', {'size': 'a4'}, quantity=500)

        # ACT
        item = self.use_case.add_product(self.cart, 'flyers', {'size': 'a4'}, quantity=500)

        # ASSERT
        self.assertEqual(quote.total, Decimal('50000.00'))
        self.assertEqual(item.total_price, quote.total)
        self.assertEqual(item.quantity, 500)
        self.assertEqual(item.configuration, {'size': 'a4', 'quantity': 500})

    def test_add_product_rejects_quantity_off_the_option(self):
        self.product_repo_mock.get_by_slug.return_value = flyer()
        with self.assertRaises(InvalidDataError):
            self.use_case.add_product(self.cart, 'flyers', {'size': 'a4'}, quantity=20)
        self.assertTrue(self.cart.is_empty())

    def test_add_product_without_quantity_option_charges_per_piece(self):
        self.product_repo_mock.get_by_slug.return_value = business_card()

        item = self.use_case.add_product(self.cart, 'business-cards', {'paper': 'premium'}, quantity=2)

        self.assertEqual(item.quantity, 2)
        self.assertEqual(item.unit_price, Decimal('5500.00'))
        self.assertEqual(item.total_price, Decimal('11000.00'))

    def test_add_product_rejects_invalid_choice(self):
        self.product_repo_mock.get_by_slug.return_value = business_card()
        with self.assertRaises(InvalidDataError):
            self.use_case.add_product(self.cart, 'business-cards', {'paper': 'vellum'})
        self.assertTrue(self.cart.is_empty())

    def test_unknown_line(self):
        with self.assertRaises(CartItemNotFoundError):
            self.use_case.update_quantity(self.cart, 'nope', 2)
        with self.assertRaises(CartItemNotFoundError):
            self.use_case.remove_item(self.cart, 'nope')


class TestCreateOrderUseCase(unittest.TestCase):

    def setUp(self):
        self.order_repo_mock = Mock()
        self.email_service_mock = Mock()
        self.use_case = CreateOrderUseCase(
            order_repo=self.order_repo_mock,
            email_service=self.email_service_mock,
        )
        self.user = User(id=1, email='ada@example.com', name='Ada')
        self.address = ShippingAddress(name='Ada', street='1 Marina', city='Lagos', state='Lagos')

    def test_checkout_with_success(self):
        """
        Scenario: checkout snapshots the cart, computes totals, saves the order
        awaiting payment, empties the cart and sends the confirmation.
        """
        # ARRANGE
        cart = Cart()
        cart.add_item(business_card(), 2, {'paper': 'premium'}, Decimal('5500'))
        self.order_repo_mock.create.side_effect = lambda order: order

        # ACT
        order = self.use_case.execute(cart, self.user, self.address)

        # ASSERT
        self.assertEqual(order.status, Order.AWAITING_PAYMENT)
        self.assertEqual(order.subtotal, Decimal('5500.00'))
        self.assertEqual(order.total, Decimal('10912.50'))
        self.assertEqual(len(order.items), 1)
        self.assertEqual(order.items[0].unit_price, Decimal('2750.00'))
        self.assertEqual(order.status_history[0].status, Order.AWAITING_PAYMENT)
        self.assertTrue(cart.is_empty())
        self.email_service_mock.send_order_confirmation.assert_called_once_with(order)

    def test_empty_cart_fails(self):
        with self.assertRaises(CartEmptyError):
            self.use_case.execute(Cart(), self.user, self.address)
        self.order_repo_mock.create.assert_not_called()

    def test_email_failure_does_not_fail_checkout(self):
        cart = Cart()
        cart.add_item(business_card(), 1, {}, Decimal('5000'))
        self.order_repo_mock.create.side_effect = lambda order: order
        self.email_service_mock.send_order_confirmation.side_effect = ConnectionError('smtp down')

        with self.assertLogs('quikprint.core.use_cases', level='ERROR'):
            order = self.use_case.execute(cart, self.user, self.address)

        self.assertEqual(order.status, Order.AWAITING_PAYMENT)


class TestOrdersUseCases(unittest.TestCase):

    def setUp(self):
        self.order_repo_mock = Mock()
        self.email_service_mock = Mock()

    def test_customer_cannot_see_other_orders(self):
        self.order_repo_mock.get_by_id.return_value = make_order()
        use_case = CustomerOrdersUseCase(self.order_repo_mock)

        with self.assertRaises(OrderAccessDeniedError):
            use_case.get_order(user_id=2, order_id=10)
        self.assertEqual(use_case.get_order(user_id=1, order_id=10).id, 10)

    def test_admin_status_update_notifies_customer(self):
        # ARRANGE
        self.order_repo_mock.get_by_id.return_value = make_order(status=Order.PAID)
        self.order_repo_mock.update_status.return_value = make_order(status=Order.PRINTING)
        use_case = AdminOrdersUseCase(self.order_repo_mock, self.email_service_mock)

        # ACT
        order = use_case.update_status(10, 'Printing', note='On the press', admin_id=99)

        # ASSERT
        self.assertEqual(order.status, Order.PRINTING)
        self.order_repo_mock.update_status.assert_called_once_with(
            10, Order.PRINTING, note='On the press', changed_by_id=99
        )
        self.email_service_mock.send_status_change.assert_called_once_with(order, Order.PRINTING)

    def test_admin_status_must_be_known(self):
        use_case = AdminOrdersUseCase(self.order_repo_mock, self.email_service_mock)
        with self.assertRaises(InvalidStatusError):
            use_case.update_status(10, 'lost')
        self.order_repo_mock.update_status.assert_not_called()

    def test_admin_note_cannot_be_empty(self):
        use_case = AdminOrdersUseCase(self.order_repo_mock, self.email_service_mock)
        with self.assertRaises(InvalidDataError):
            use_case.add_note(10, '   ')


class TestReportsUseCase(unittest.TestCase):

    def setUp(self):
        self.order_repo_mock = Mock()
        self.use_case = ReportsUseCase(self.order_repo_mock, Mock(), Mock())

    def test_orders_by_status_lists_every_status(self):
        self.order_repo_mock.count_by_status.return_value = {'paid': 3}
        report = self.use_case.orders_by_status()
        self.assertEqual(list(report), list(Order.STATUSES))
        self.assertEqual(report['paid'], 3)
        self.assertEqual(report['pending'], 0)

    def test_daily_sales_fills_days_without_sales(self):
        self.order_repo_mock.daily_sales.return_value = [
            {'date': date(2026, 1, 2), 'orders': 2, 'revenue': Decimal('15000')},
        ]

        report = self.use_case.daily_sales(3, today=date(2026, 1, 3))

        self.order_repo_mock.daily_sales.assert_called_once_with(date(2026, 1, 1))
        self.assertEqual([row['date'] for row in report], [date(2026, 1, 1), date(2026, 1, 2), date(2026, 1, 3)])
        self.assertEqual([row['orders'] for row in report], [0, 2, 0])
        self.assertEqual(report[1]['revenue'], Decimal('15000.00'))

    def test_daily_sales_needs_a_day(self):
        with self.assertRaises(InvalidDataError):
            self.use_case.daily_sales(0)

    def test_weekly_sales_groups_days_into_monday_weeks(self):
        """
        Scenario: sales of the last three weeks (Wednesday 14 Jan 2026 being today) are
        grouped per Monday-to-Sunday week, the quiet first week included.
        """
        # ARRANGE
        self.order_repo_mock.daily_sales.return_value = [
            {'date': date(2026, 1, 6), 'orders': 2, 'revenue': Decimal('10000')},
            {'date': date(2026, 1, 8), 'orders': 1, 'revenue': Decimal('5000.50')},
            {'date': date(2026, 1, 13), 'orders': 1, 'revenue': Decimal('20000')},
        ]

        # ACT
        report = self.use_case.weekly_sales(3, today=date(2026, 1, 14))

        # ASSERT
        self.order_repo_mock.daily_sales.assert_called_once_with(date(2025, 12, 29))
        self.assertEqual(
            [(row['week_start'], row['week_end']) for row in report],
            [
                (date(2025, 12, 29), date(2026, 1, 4)),
                (date(2026, 1, 5), date(2026, 1, 11)),
                (date(2026, 1, 12), date(2026, 1, 18)),
            ],
        )
        self.assertEqual([row['orders'] for row in report], [0, 3, 1])
        self.assertEqual([row['revenue'] for row in report],
                         [Decimal('0.00'), Decimal('15000.50'), Decimal('20000.00')])
        self.assertEqual([row['average_order_value'] for row in report],
                         [Decimal('0.00'), Decimal('5000.17'), Decimal('20000.00')])

    def test_weekly_sales_needs_a_week(self):
        with self.assertRaises(InvalidDataError):
            self.use_case.weekly_sales(0)
        self.order_repo_mock.daily_sales.assert_not_called()


class TestPaymentUseCase(unittest.TestCase):

    def setUp(self):
        self.order_repo_mock = Mock()
        self.gateway_mock = Mock()
        self.email_service_mock = Mock()
        self.use_case = PaymentUseCase(self.order_repo_mock, self.gateway_mock, self.email_service_mock)
        self.user = User(id=1, email='ada@example.com')

    def test_initialize_stores_reference(self):
        # ARRANGE
        self.order_repo_mock.get_by_id.return_value = make_order()
        self.gateway_mock.initialize.side_effect = lambda order, email, reference: PaymentTransaction(
            reference=reference, status='pending', amount=order.total, authorization_url='https://pay.test/x'
        )

        # ACT
        transaction = self.use_case.initialize(self.user, 10)

        # ASSERT
        self.assertTrue(transaction.reference.startswith('QP-20260101-ABC123-'))
        self.order_repo_mock.set_payment_reference.assert_called_once_with(10, transaction.reference)

    def test_initialize_rejects_paid_order(self):
        self.order_repo_mock.get_by_id.return_value = make_order(status=Order.PAID)
        with self.assertRaises(InvalidStatusError):
            self.use_case.initialize(self.user, 10)
        self.gateway_mock.initialize.assert_not_called()

    def test_verify_marks_order_paid(self):
        self.order_repo_mock.get_by_payment_reference.return_value = make_order(payment_reference='REF')
        self.gateway_mock.verify.return_value = PaymentTransaction(
            reference='REF', status='success', amount=Decimal('10912.50')
        )
        self.order_repo_mock.update_status.return_value = make_order(status=Order.PAID)

        order = self.use_case.verify('REF')

        self.assertEqual(order.status, Order.PAID)
        self.email_service_mock.send_payment_approved.assert_called_once_with(order)

    def test_verify_rejects_short_payment(self):
        self.order_repo_mock.get_by_payment_reference.return_value = make_order(payment_reference='REF')
        self.gateway_mock.verify.return_value = PaymentTransaction(
            reference='REF', status='success', amount=Decimal('100')
        )
        with self.assertRaises(PaymentFailedError):
            self.use_case.verify('REF')
        self.order_repo_mock.update_status.assert_not_called()

    def test_verify_is_idempotent(self):
        self.order_repo_mock.get_by_payment_reference.return_value = make_order(status=Order.PAID)
        self.assertEqual(self.use_case.verify('REF').status, Order.PAID)
        self.gateway_mock.verify.assert_not_called()

    def test_verify_unknown_reference(self):
        self.order_repo_mock.get_by_payment_reference.return_value = None
        with self.assertRaises(OrderNotFoundError):
            self.use_case.verify('REF')

    def test_webhook_with_invalid_signature(self):
        self.gateway_mock.is_valid_signature.return_value = False
        with self.assertRaises(PaymentFailedError):
            self.use_case.handle_webhook(b'{}', 'bad')

    def test_webhook_rejects_payloads_that_are_not_objects(self):
        """
        Scenario: correctly signed bodies that are JSON but not objects are refused as bad data.
        """
        # ARRANGE
        self.gateway_mock.is_valid_signature.return_value = True

        # ACT and ASSERT
        with self.assertRaises(InvalidDataError):
            self.use_case.handle_webhook(b'[1, 2]', 'sig')
        with self.assertRaises(InvalidDataError):
            self.use_case.handle_webhook(b'{"event": "charge.success", "data": ["REF"]}', 'sig')
        self.gateway_mock.verify.assert_not_called()

    def test_webhook_ignores_other_events(self):
        self.gateway_mock.is_valid_signature.return_value = True
        self.assertIsNone(self.use_case.handle_webhook(b'{"event": "transfer.success"}', 'sig'))
        self.gateway_mock.verify.assert_not_called()

    def test_webhook_charge_success_verifies(self):
        self.gateway_mock.is_valid_signature.return_value = True
        self.order_repo_mock.get_by_payment_reference.return_value = make_order(status=Order.PAID)

        order = self.use_case.handle_webhook(b'{"event": "charge.success", "data": {"reference": "REF"}}', 'sig')

        self.order_repo_mock.get_by_payment_reference.assert_called_once_with('REF')
        self.assertEqual(order.status, Order.PAID)


class TestArtworkUseCase(unittest.TestCase):

    def setUp(self):
        self.artwork_repo_mock = Mock()
        self.artwork_repo_mock.get_item_owner_id.return_value = 1
        self.use_case = ArtworkUseCase(self.artwork_repo_mock, max_size=1024 * 1024)
        self.owner = User(id=1, email='ada@example.com')
        self.stranger = User(id=2, email='bob@example.com')
        self.staff = User(id=9, email='staff@example.com', is_staff=True)

    def test_owner_uploads_pdf(self):
        """
        Scenario: the owner of the order uploads a PDF for one of its lines.
        """
        # ARRANGE
        content = Mock()
        self.artwork_repo_mock.create.return_value = ArtworkFile(
            id=5, order_item_id=7, file_name='card.pdf', file_size=2048, content_type='application/pdf',
        )

        # ACT
        artwork = self.use_case.upload(self.owner, 7, content, 'card.pdf', 'Application/PDF', 2048)

        # ASSERT
        self.assertEqual(artwork.id, 5)
        self.artwork_repo_mock.get_item_owner_id.assert_called_once_with(7)
        self.artwork_repo_mock.create.assert_called_once_with(
            7, content, 'card.pdf', 'application/pdf', 2048, uploaded_by_id=1,
        )

    def test_upload_rejects_bad_files(self):
        """
        Scenario: empty, oversized, wrongly named and wrongly typed files never reach storage.
        """
        bad_files = [
            ('card.pdf', 'application/pdf', 0),
            ('card.pdf', 'application/pdf', 1024 * 1024 + 1),
            ('card.exe', 'application/pdf', 2048),
            ('card', 'application/pdf', 2048),
            ('card.pdf', 'application/zip', 2048),
        ]
        for file_name, content_type, file_size in bad_files:
            with self.subTest(file_name=file_name, content_type=content_type, file_size=file_size):
                with self.assertRaises(InvalidDataError):
                    self.use_case.upload(self.owner, 7, Mock(), file_name, content_type, file_size)
        self.artwork_repo_mock.create.assert_not_called()

    def test_oversized_message_names_the_limit(self):
        with self.assertRaisesRegex(InvalidDataError, 'Maximum size is 1 MB'):
            self.use_case.validate('poster.png', 'image/png', 2 * 1024 * 1024)

    def test_only_owner_or_staff_reach_the_files(self):
        """
        Scenario: another customer is refused, staff may list any order line.
        """
        # ACT and ASSERT
        with self.assertRaises(OrderAccessDeniedError):
            self.use_case.upload(self.stranger, 7, Mock(), 'card.pdf', 'application/pdf', 2048)
        with self.assertRaises(OrderAccessDeniedError):
            self.use_case.list_files(self.stranger, 7)

        self.artwork_repo_mock.list_by_item.return_value = []
        self.assertEqual(self.use_case.list_files(self.staff, 7), [])
        self.artwork_repo_mock.create.assert_not_called()

    def test_unknown_order_line(self):
        self.artwork_repo_mock.get_item_owner_id.return_value = None
        with self.assertRaises(OrderItemNotFoundError):
            self.use_case.list_files(self.owner, 404)

    def test_delete_file(self):
        # ARRANGE
        self.artwork_repo_mock.get_by_id.return_value = ArtworkFile(
            id=5, order_item_id=7, file_name='card.pdf', file_size=2048, content_type='application/pdf',
        )

        # ACT and ASSERT
        with self.assertRaises(OrderAccessDeniedError):
            self.use_case.delete_file(self.stranger, 5)
        self.artwork_repo_mock.delete.assert_not_called()

        self.use_case.delete_file(self.owner, 5)
        self.artwork_repo_mock.delete.assert_called_once_with(5)

    def test_delete_unknown_file(self):
        self.artwork_repo_mock.get_by_id.return_value = None
        with self.assertRaises(ArtworkNotFoundError):
            self.use_case.delete_file(self.owner, 5)


if __name__ == '__main__':
    unittest.main()
