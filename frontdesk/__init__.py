"""Hotel front desk dashboard: rooms, guests, reservations and daily check-in/out."""

__version__ = "0.1.0"
