from models.table import ColumnDescriptor, TableDescriptor, Pagination, TablePage  # noqa: F401
from models.table import TableListResponse, ColumnListResponse  # noqa: F401
from models.relationship import ForeignKeyEdge, MainRecord, RelationshipGraph, RelationshipListResponse  # noqa: F401
