"""DeliveryAddress aggregate: where a customer's orders are delivered."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.errors import AddressNotFoundError, AddressOwnershipError


@ordering.aggregate
class DeliveryAddress:
    customer_id = Identifier(required=True)
    label = String(max_length=50)
    address_line = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    postal_code = String(max_length=20)
    is_default = Boolean(default=False)

    def belongs_to(self, customer_id) -> bool:
        return str(self.customer_id) == str(customer_id)


def addresses_for(customer_id) -> list[DeliveryAddress]:
    """The customer's addresses, default first."""
    addresses = (
        current_domain.repository_for(DeliveryAddress)._dao.query.filter(customer_id=str(customer_id)).all().items
    )
    return sorted(addresses, key=lambda a: not a.is_default)


def owned_address(address_id, customer_id) -> DeliveryAddress:
    """Load an address and check it belongs to ``customer_id``.

    Raises:
        AddressNotFoundError: no address with that id.
        AddressOwnershipError: it belongs to a different customer.
    """
    try:
        address = current_domain.repository_for(DeliveryAddress).get(address_id)
    except ObjectNotFoundError:
        raise AddressNotFoundError(address_id)
    if not address.belongs_to(customer_id):
        raise AddressOwnershipError()
    return address


@ordering.command(part_of="DeliveryAddress")
class AddDeliveryAddress:
    customer_id = Identifier(required=True)
    label = String(max_length=50)
    address_line = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    postal_code = String(max_length=20)
    is_default = Boolean(default=False)


@ordering.command_handler(part_of=DeliveryAddress)
class DeliveryAddressHandler:
    @handle(AddDeliveryAddress)
    def add_delivery_address(self, command):
        repo = current_domain.repository_for(DeliveryAddress)
        existing = addresses_for(command.customer_id)
        is_default = command.is_default or not existing

        if is_default:
            for address in existing:
                if address.is_default:
                    address.is_default = False
                    repo.add(address)

        address = DeliveryAddress(
            customer_id=command.customer_id,
            label=command.label,
            address_line=command.address_line,
            city=command.city,
            postal_code=command.postal_code,
            is_default=is_default,
        )
        repo.add(address)
        return str(address.id)
