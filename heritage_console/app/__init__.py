"""
Heritage Console data-access package.

Every console screen reaches the backend through this package, which
provides:
- Request deduplication and a short-lived cache for public reads
- Retry with exponential backoff
- Pagination and error normalization
- User-facing error notifications

Structure:
- app.main: Process-wide request client construction.
- app.adapters: The request client and its collaborators (endpoint
  policy, credential store, notification sink).
- app.caching: Response cache and in-flight request table.
- app.normalization: Payload and error normalization.
- app.controllers: Query and mutation controllers used by screens.
- app.services: Resource endpoint catalogues.
"""
