"""Application layer module.

Contains application services (use cases) that orchestrate
domain logic and infrastructure:

- inventory_ledger: stock counters and the reservation protocol
- cart_service: per-user carts
- checkout_service: cart to order in one unit of work
- order_service: order queries, status changes and cancellation

Services are imported from their modules; the catalog depends on the
inventory ledger, so this package does not re-export them.
"""
