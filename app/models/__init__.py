from app.models.inventory import CodeSequence, InventoryItem, StockMovement
from app.models.sales import Sale
