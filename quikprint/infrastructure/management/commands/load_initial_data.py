from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from quikprint.catalog.models import Category, Product, QuantityTier, PricingRule


CATEGORIES = [
    ('Business Cards', 'business-cards', 'Professional business cards with premium finishes and lamination options'),
    ('Flyers and Handbills', 'flyers-handbills', 'Eye-catching flyers for events, promotions and marketing'),
    ('Banners and Large Format', 'banners-large-format', 'Large format printing including banners, roll-ups and signage'),
    ('Stickers and Labels', 'stickers-labels', 'Custom cut stickers and product labels'),
]


def _choices(*rows):
    return [{'value': value, 'label': label, 'priceModifier': modifier} for value, label, modifier in rows]


PRODUCTS = [
    {
        'name': 'Premium Business Cards',
        'slug': 'premium-business-cards',
        'category': 'business-cards',
        'short_description': 'Professional business cards that make lasting impressions',
        'description': 'Printed on high-quality cardstock with vibrant colours and sharp details.',
        'base_price': Decimal('8500'),
        'min_quantity': 100,
        'turnaround': '2-3 business days',
        'images': ['/images/business-cards.jpg'],
        'features': ['Full colour printing (CMYK)', 'Premium 350gsm cardstock', 'Matte or gloss lamination'],
        'options': [
            {'id': 'paper', 'name': 'Paper Stock', 'type': 'select', 'options': _choices(
                ('300gsm', '300gsm Cardstock', 0),
                ('350gsm', '350gsm Premium', 2000),
                ('400gsm', '400gsm Ultra Thick', 4000),
            )},
            {'id': 'finish', 'name': 'Finish', 'type': 'radio', 'options': _choices(
                ('matte', 'Matte Lamination', 0),
                ('gloss', 'Gloss Lamination', 1500),
                ('soft-touch', 'Soft Touch Laminate', 3500),
            )},
            {'id': 'quantity', 'name': 'Quantity', 'type': 'select', 'options': _choices(
                ('100', '100 cards', 0),
                ('250', '250 cards', 4000),
                ('500', '500 cards', 7500),
                ('1000', '1,000 cards', 12000),
            )},
        ],
    },
    {
        'name': 'Custom Flyers and Handbills',
        'slug': 'flyers-handbills',
        'category': 'flyers-handbills',
        'short_description': 'Eye-catching flyers for effective marketing',
        'description': 'High-impact flyers and handbills for events, promotions and campaigns.',
        'base_price': Decimal('12000'),
        'min_quantity': 100,
        'turnaround': '2-3 business days',
        'images': ['/images/flyers.jpg'],
        'features': ['Full colour printing', 'Multiple size options', 'Bulk discounts'],
        'options': [
            {'id': 'size', 'name': 'Size', 'type': 'select', 'options': _choices(
                ('a5', 'A5 (148 x 210mm)', 0),
                ('a4', 'A4 (210 x 297mm)', 5000),
                ('dl', 'DL (99 x 210mm)', -2000),
            )},
            {'id': 'quantity', 'name': 'Quantity', 'type': 'quantity', 'min': 100, 'max': 10000, 'step': 50},
        ],
        'tiers': [(100, 249, Decimal('12000')), (250, 499, Decimal('18000')), (500, 10000, Decimal('26000'))],
        'rules': [('rush_fee', Decimal('5000'), 'Next-day production')],
    },
    {
        'name': 'Flex Banner',
        'slug': 'flex-banner',
        'category': 'banners-large-format',
        'short_description': 'Outdoor flex banners printed to any size',
        'description': 'Weather-resistant flex banners, priced per square foot.',
        'base_price': Decimal('350'),
        'pricing_strategy': 'area_with_options',
        'turnaround': '1-2 business days',
        'images': ['/images/banners.jpg'],
        'features': ['UV-resistant inks', 'Eyelets included'],
        'options': [
            {'id': 'width', 'name': 'Width', 'type': 'dimension', 'min': 2, 'max': 40, 'step': 1, 'unit': 'ft'},
            {'id': 'height', 'name': 'Height', 'type': 'dimension', 'min': 2, 'max': 20, 'step': 1, 'unit': 'ft'},
            {'id': 'finishing', 'name': 'Finishing', 'type': 'radio', 'options': _choices(
                ('eyelets', 'Eyelets', 0),
                ('pole-pockets', 'Pole pockets', 2500),
            )},
        ],
        'rules': [('minimum_charge', Decimal('5000'), 'Minimum banner charge'), ('setup_fee', Decimal('1000'), 'Artwork setup')],
    },
    {
        'name': 'Die-Cut Stickers',
        'slug': 'die-cut-stickers',
        'category': 'stickers-labels',
        'short_description': 'Custom shaped vinyl stickers',
        'description': 'Durable vinyl stickers cut to the shape of your design.',
        'base_price': Decimal('7500'),
        'min_quantity': 50,
        'turnaround': '3-4 business days',
        'images': ['/images/stickers.jpg'],
        'features': ['Waterproof vinyl', 'Any shape'],
        'options': [
            {'id': 'material', 'name': 'Material', 'type': 'select', 'options': _choices(
                ('vinyl', 'White Vinyl', None),
                ('clear', 'Clear Vinyl', 1500),
                ('holographic', 'Holographic', 4000),
            )},
            {'id': 'quantity', 'name': 'Quantity', 'type': 'quantity', 'min': 50, 'max': 5000, 'step': 50},
        ],
    },
]


class Command(BaseCommand):
    help = 'Loads the starter catalog (and an admin account) for development.'

    def add_arguments(self, parser):
        parser.add_argument('--admin-email', default='admin@quikprint.com')
        parser.add_argument('--admin-password', default='admin123')

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Loading initial data...')

        User = get_user_model()
        if not User.objects.filter(is_staff=True).exists():
            User.objects.create_superuser(
                options['admin_email'], options['admin_password'], first_name='Admin', last_name='User'
            )
            self.stdout.write(self.style.SUCCESS(f"Created admin {options['admin_email']}"))

        categories = {}
        for name, slug, description in CATEGORIES:
            category, created = Category.objects.get_or_create(
                slug=slug, defaults={'name': name, 'description': description}
            )
            categories[slug] = category
            if created:
                self.stdout.write(self.style.SUCCESS(f'Created category "{name}"'))

        for data in PRODUCTS:
            if Product.objects.filter(slug=data['slug']).exists():
                self.stdout.write(f"Product '{data['name']}' already exists, skipping...")
                continue
            product = Product(
                name=data['name'],
                slug=data['slug'],
                category=categories[data['category']],
                short_description=data['short_description'],
                description=data['description'],
                base_price=data['base_price'],
                pricing_strategy=data.get('pricing_strategy', 'auto'),
                min_quantity=data.get('min_quantity', 1),
                turnaround=data['turnaround'],
                images=data['images'],
                features=data['features'],
                options=data['options'],
            )
            product.full_clean()
            product.save()
            for min_qty, max_qty, price in data.get('tiers', []):
                QuantityTier.objects.create(product=product, min_qty=min_qty, max_qty=max_qty, price=price)
            for rule_type, value, description in data.get('rules', []):
                PricingRule.objects.create(product=product, rule_type=rule_type, value=value, description=description)
            self.stdout.write(self.style.SUCCESS(f'Created product "{product.name}"'))

        self.stdout.write(self.style.SUCCESS('Initial data loaded.'))
