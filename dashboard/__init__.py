"""
Dashboard Package.

HTTP surface for the layout engine. Stateless: the browser owns
its layout state and local storage.

Modules:
- main: FastAPI application
- routers/: Widget, column and holdings table endpoints
- services: Layout operations over client-supplied state
- schemas: Request / response models
"""
