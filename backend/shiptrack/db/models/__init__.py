# import all models for Alembic
from shiptrack.db.models.department import Department
from shiptrack.db.models.item import Item
from shiptrack.db.models.user import User, Role
from shiptrack.db.models.shipment import Shipment
from shiptrack.db.models.import_run import ImportRun, ImportStatus
from shiptrack.db.models.import_error import ImportRowError
