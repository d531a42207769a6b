"""
orderflow-admin: flow administration over the HTTP API.

The commands hold no business rules. They call the backend with httpx
(tagged X-Frontend-ID: cli) and render the answers with rich.

    orderflow-admin flows list
    orderflow-admin flows shop <shop-id>
    orderflow-admin flows can-change packed courier_picked --role Courier
    orderflow-admin health status --detailed
"""
