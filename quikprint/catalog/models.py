from django.core.exceptions import ValidationError
from django.db import models
from django.utils.text import slugify

from quikprint.core.exceptions import InvalidDataError
from quikprint.core.pricing import STRATEGIES

# ====================================================================
# 1. Category
# ====================================================================

class Category(models.Model):
    """Groups printing products (Business Cards, Flyers, Banners...)."""
    name = models.CharField(max_length=100, unique=True)
    slug = models.SlugField(max_length=100, unique=True, blank=True)
    description = models.TextField(blank=True)
    image = models.CharField(max_length=500, blank=True, help_text="Image URL")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Category"
        verbose_name_plural = "Categories"
        db_table = 'catalog_category'
        ordering = ['name']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)
        super().save(*args, **kwargs)

# ====================================================================
# 2. Product
# ====================================================================

class Product(models.Model):
    """
    A configurable printing product.

    ``options`` holds the ordered option definitions as JSON, e.g.
    ``[{"id": "paper", "name": "Paper", "type": "select",
    "options": [{"value": "premium", "label": "Premium", "priceModifier": 500}]}]``.
    """
    STRATEGY_CHOICES = [(strategy, strategy.replace('_', ' ').capitalize()) for strategy in STRATEGIES]

    category = models.ForeignKey(Category, on_delete=models.SET_NULL, null=True, blank=True, related_name='products')

    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    description = models.TextField(blank=True)
    short_description = models.CharField(max_length=500, blank=True)

    base_price = models.DecimalField(max_digits=12, decimal_places=2)
    pricing_strategy = models.CharField(max_length=20, choices=STRATEGY_CHOICES, default='auto')
    min_quantity = models.PositiveIntegerField(default=1)

    images = models.JSONField(default=list, blank=True)
    options = models.JSONField(default=list, blank=True)
    features = models.JSONField(default=list, blank=True)
    turnaround = models.CharField(max_length=100, blank=True, help_text="e.g. 3-5 business days")

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Product"
        verbose_name_plural = "Products"
        db_table = 'catalog_product'
        ordering = ['name']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)
        super().save(*args, **kwargs)

    def clean(self):
        # Option definitions must satisfy the domain invariants before they reach the configurator
        from quikprint.infrastructure.mappers import parse_options
        try:
            parse_options(self.options)
        except InvalidDataError as e:
            raise ValidationError({'options': e.message})
        if self.min_quantity < 1:
            raise ValidationError({'min_quantity': "Minimum quantity must be at least 1."})

# ====================================================================
# 3. Pricing tables
# ====================================================================

class QuantityTier(models.Model):
    """Base price override for an order-quantity band."""
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='quantity_tiers')
    min_qty = models.PositiveIntegerField()
    max_qty = models.PositiveIntegerField()
    price = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        verbose_name = "Quantity tier"
        verbose_name_plural = "Quantity tiers"
        db_table = 'catalog_quantity_tier'
        ordering = ['product', 'min_qty']

    def __str__(self):
        return f"{self.product.name}: {self.min_qty}-{self.max_qty}"

    def clean(self):
        if self.min_qty is not None and self.max_qty is not None and self.min_qty > self.max_qty:
            raise ValidationError("The tier minimum cannot exceed its maximum.")


class PricingRule(models.Model):
    """Setup fee, rush fee or minimum charge of a product."""
    RULE_CHOICES = [
        ('setup_fee', 'Setup fee'),
        ('rush_fee', 'Rush fee'),
        ('minimum_charge', 'Minimum charge'),
    ]

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='pricing_rules')
    rule_type = models.CharField(max_length=20, choices=RULE_CHOICES)
    value = models.DecimalField(max_digits=12, decimal_places=2)
    description = models.CharField(max_length=255, blank=True)

    class Meta:
        verbose_name = "Pricing rule"
        verbose_name_plural = "Pricing rules"
        db_table = 'catalog_pricing_rule'
        unique_together = ('product', 'rule_type')

    def __str__(self):
        return f"{self.product.name}: {self.get_rule_type_display()}"
