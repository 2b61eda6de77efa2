"""
Step-by-step product configurator.

There is one step per product option, numbered from 1 in option order.
Every option holds a valid value from the moment the configurator is created,
so jumping to any step is always allowed. Confirming is only possible on the
last step and turns the configuration into a cart line.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional

from quikprint.core.cart import Cart, CartItem
from quikprint.core.entities import Configuration, Product, ProductOption
from quikprint.core.exceptions import InvalidDataError, InvalidStepError
from quikprint.core.money import parse_decimal
from quikprint.core.pricing import PriceBreakdown, PricingEngine, configured_quantity, default_engine


@dataclass(frozen=True)
class ConfigurationStep:
    number: int
    name: str
    option: ProductOption


def initial_configuration(product: Product) -> Configuration:
    """Seeds every option: first choice, dimension minimum (or 1), minimum quantity."""
    configuration = {}
    for option in product.options:
        if option.is_choice:
            configuration[option.id] = option.choices[0].value if option.choices else ''
        elif option.type == ProductOption.DIMENSION:
            configuration[option.id] = option.min if option.min is not None else Decimal('1')
        elif option.type == ProductOption.QUANTITY:
            configuration[option.id] = product.min_quantity
    return configuration


class ProductConfigurator:

    def __init__(self, product: Product, configuration: Optional[Configuration] = None,
                 current_step: int = 1, engine: Optional[PricingEngine] = None):
        self.product = product
        self.engine = engine or default_engine
        self.configuration = initial_configuration(product)
        for option_id, value in (configuration or {}).items():
            if product.get_option(option_id) is not None:
                self.select(option_id, value)
        self.current_step = 1
        if current_step != 1:
            self.go_to(current_step)

    # --- State ---

    @property
    def steps(self) -> List[ConfigurationStep]:
        return [
            ConfigurationStep(number=index, name=option.name, option=option)
            for index, option in enumerate(self.product.options, start=1)
        ]

    @property
    def total_steps(self) -> int:
        return len(self.product.options)

    @property
    def current_option(self) -> Optional[ProductOption]:
        if not self.total_steps:
            return None
        return self.product.options[self.current_step - 1]

    @property
    def can_go_next(self) -> bool:
        return self.current_step < self.total_steps

    @property
    def can_go_previous(self) -> bool:
        return self.current_step > 1

    @property
    def is_last_step(self) -> bool:
        return self.current_step >= self.total_steps

    @property
    def breakdown(self) -> PriceBreakdown:
        return self.engine.quote(self.product, self.configuration)

    @property
    def price(self) -> Decimal:
        return self.breakdown.total

    @property
    def quantity(self) -> int:
        return configured_quantity(self.product, self.configuration)

    # --- Transitions ---

    def next(self) -> int:
        if not self.can_go_next:
            raise InvalidStepError("Already at the last step.")
        self.current_step += 1
        return self.current_step

    def previous(self) -> int:
        if not self.can_go_previous:
            raise InvalidStepError("Already at the first step.")
        self.current_step -= 1
        return self.current_step

    def go_to(self, step: int) -> int:
        """Jumps straight to a step (step indicator click)."""
        if not isinstance(step, int) or isinstance(step, bool) or not 1 <= step <= max(self.total_steps, 1):
            raise InvalidStepError(f"Step {step} does not exist for {self.product.name}.")
        self.current_step = step
        return self.current_step

    def select(self, option_id: str, value: Any) -> Configuration:
        """Records the customer's choice for an option, rejecting values the option cannot hold."""
        option = self.product.get_option(option_id)
        if option is None:
            raise InvalidDataError(f"Unknown option '{option_id}' for {self.product.name}.")

        if option.is_choice:
            if option.find_choice(value) is None:
                raise InvalidDataError(f"'{value}' is not a valid choice for {option.name}.")
            self.configuration[option.id] = value
            return self.configuration

        number = parse_decimal(value)
        if number is None:
            raise InvalidDataError(f"{option.name} must be a number.")
        lower = option.min
        if option.type == ProductOption.QUANTITY:
            lower = max(Decimal(lower or 0), Decimal(self.product.min_quantity))
        if lower is not None and number < Decimal(lower):
            raise InvalidDataError(f"{option.name} must be at least {lower}.")
        if option.max is not None and number > Decimal(option.max):
            raise InvalidDataError(f"{option.name} must be at most {option.max}.")
        if option.step:
            start = Decimal(option.min) if option.min is not None else Decimal(0)
            if (number - start) % Decimal(option.step) != 0:
                raise InvalidDataError(f"{option.name} must go up in steps of {option.step} from {start}.")
        if option.type == ProductOption.QUANTITY:
            if number != number.to_integral_value():
                raise InvalidDataError(f"{option.name} must be a whole number.")
            self.configuration[option.id] = int(number)
        else:
            self.configuration[option.id] = number
        return self.configuration

    def confirm(self, cart: Cart) -> CartItem:
        """Adds the configured product to the cart; only available on the last step."""
        if not self.is_last_step:
            raise InvalidStepError("Complete every step before adding to the cart.")
        return cart.add_item(self.product, self.quantity, self.configuration, self.price)

    # --- Persistence helpers ---

    def to_state(self) -> Dict[str, Any]:
        return {
            'product_id': self.product.id,
            'current_step': self.current_step,
            'configuration': {key: _serialize_value(value) for key, value in self.configuration.items()},
        }

    @classmethod
    def from_state(cls, product: Product, state: Dict[str, Any], engine: Optional[PricingEngine] = None):
        if not state or str(state.get('product_id')) != str(product.id):
            return cls(product, engine=engine)
        try:
            return cls(
                product,
                configuration=state.get('configuration') or {},
                current_step=state.get('current_step', 1),
                engine=engine,
            )
        except (InvalidDataError, InvalidStepError):
            # The catalog changed under a stored configuration: start over
            return cls(product, engine=engine)


def _serialize_value(value):
    # Sessions are JSON encoded; keep numbers as strings to preserve Decimal precision
    if isinstance(value, Decimal):
        return str(value)
    return value
