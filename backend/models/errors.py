"""Error kinds raised by the inventory core"""


class InventoryError(Exception):
    """Base class for inventory errors"""


class ValidationError(InventoryError):
    """Candidate part rejected before any remote call"""


class DuplicatePartNoError(ValidationError):
    def __init__(self, part_no: str):
        self.part_no = part_no
        super().__init__(f'Part with Part No "{part_no}" already exists in this product')


class SyncError(InventoryError):
    """A remote-store call failed during a reconciliation round"""

    def __init__(self, message: str, product_name: str = None):
        self.product_name = product_name
        super().__init__(message)


class AuthorizationError(InventoryError):
    """Current user may not perform a mutating action"""
