"""Domain logic over the persistence gateway."""
from wms.services.inventory import InventoryService, DocumentNumberGenerator
from wms.services.opname import OpnameService
from wms.services.purchase import PurchaseService

__all__ = ["InventoryService", "DocumentNumberGenerator", "OpnameService", "PurchaseService"]
