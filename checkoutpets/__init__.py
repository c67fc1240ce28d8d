"""CheckoutPets: a virtual-pet API backed by redis."""

__version__ = "0.1.0"
