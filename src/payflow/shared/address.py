"""Postal address value object shared by orders and payment sources."""

from protean.fields import String

from payflow.domain import payflow


@payflow.value_object
class Address:
    firstname = String(max_length=100)
    lastname = String(max_length=100)
    company = String(max_length=255)
    address1 = String(required=True, max_length=255)
    address2 = String(max_length=255)
    city = String(required=True, max_length=100)
    state_name = String(max_length=100)
    zipcode = String(max_length=20)
    country_iso = String(max_length=2)
    phone = String(max_length=30)

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.firstname, self.lastname) if part)

    def to_gateway_hash(self) -> dict:
        """Address in the flat shape payment gateways expect."""
        return {
            "name": self.full_name,
            "company": self.company,
            "address1": self.address1,
            "address2": self.address2,
            "city": self.city,
            "state": self.state_name,
            "zip": self.zipcode,
            "country": self.country_iso,
            "phone": self.phone,
        }
