"""Store service business logic (cart, pricing, payment flow, orders)."""
