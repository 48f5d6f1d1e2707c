"""Domain layer for ledgerly application.

Services are imported from their own modules (``ledgerly.domain.invoice``,
``ledgerly.domain.purchase_order``, ...) so the database layer can import
``ledgerly.domain.entities`` without pulling the services in.
"""
