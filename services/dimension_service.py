"""
Dimension service: entity store and name resolver.

Resolves free-text dimension names (category, brand, tax, unit, ...) from an
import batch into entity ids, creating entities that don't exist yet.

Resolution is two-phase per kind: one read of the kind's table, then one
insert per missing name. Dimension tables are small, so the read fetches the
whole table and matching happens in memory on the case-folded name; names
that differ only by case resolve to the same entity.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional
from uuid import uuid4
import structlog

from config import get_supabase_client, settings
from models.catalog_import import NormalizedRow
from models.dimension import DimensionKind, DimensionEntity, DimensionCreate
from exceptions import DatabaseError, DimensionStoreError
from utils.text_utils import clean_name, name_key, generate_slug

logger = structlog.get_logger(__name__)


# Resolution order: subcategories need their parent category ids
RESOLUTION_ORDER = [
    DimensionKind.CATEGORY,
    DimensionKind.SUB_CATEGORY,
    DimensionKind.BRAND,
    DimensionKind.TAX,
    DimensionKind.UNIT,
    DimensionKind.COLOR,
    DimensionKind.WARRANTY,
    DimensionKind.SIZE,
    DimensionKind.VOLUME,
]

# Column holding a subcategory's parent category
SUB_CATEGORY_PARENT_COLUMN = "category_id"


@dataclass
class DimensionMap:
    """Resolved entities of one kind, keyed by normalized name."""
    kind: DimensionKind
    entities: dict[str, DimensionEntity] = field(default_factory=dict)
    created: list[DimensionEntity] = field(default_factory=list)

    def ids(self) -> dict[str, str]:
        """Normalized name -> entity id."""
        return {key: entity.id for key, entity in self.entities.items()}

    def get(self, name: Any) -> Optional[DimensionEntity]:
        key = name_key(name)
        if key is None:
            return None
        return self.entities.get(key)

    def get_id(self, name: Any) -> Optional[str]:
        entity = self.get(name)
        return entity.id if entity else None

    def by_id(self, entity_id: Optional[str]) -> Optional[DimensionEntity]:
        if not entity_id:
            return None
        for entity in self.entities.values():
            if entity.id == entity_id:
                return entity
        return None

    @property
    def proposed(self) -> list[DimensionEntity]:
        return [e for e in self.created if e.proposed]


def collect_names(rows: Iterable[NormalizedRow], field_name: str) -> list[str]:
    """Distinct trimmed names in a column, in first-seen order."""
    seen: dict[str, str] = {}
    for row in rows:
        name = clean_name(row.get(field_name))
        if name is None:
            continue
        seen.setdefault(name.casefold(), name)
    return list(seen.values())


def collect_parent_links(
    rows: Iterable[NormalizedRow],
    child_field: str,
    parent_field: str
) -> dict[str, str]:
    """
    Subcategory key -> parent category name, from rows naming both.

    The first row pairing a subcategory with a parent wins.
    """
    links: dict[str, str] = {}
    for row in rows:
        child = name_key(row.get(child_field))
        parent = clean_name(row.get(parent_field))
        if child is None or parent is None:
            continue

        if child not in links:
            links[child] = parent
        elif links[child].casefold() != parent.casefold():
            logger.warning(
                "subcategory_parent_conflict",
                subcategory=child,
                kept_parent=links[child],
                ignored_parent=parent
            )
    return links


class DimensionService:
    """
    Dimension entity store and resolver.

    One Supabase table per DimensionKind. Entities are never deleted here.
    """

    def __init__(self):
        self.db = get_supabase_client()

    # ===================
    # STORE OPERATIONS
    # ===================

    def list_all(self, kind: DimensionKind) -> list[DimensionEntity]:
        """
        Get every entity of a kind.

        Raises:
            DatabaseError: If the query fails
        """
        logger.debug("listing_dimensions", kind=kind.value)

        try:
            result = self.db.table(kind.table).select("*").execute()
            return [self._row_to_entity(kind, row) for row in result.data]

        except Exception as e:
            logger.error(
                "list_dimensions_failed",
                kind=kind.value,
                error=str(e)
            )
            raise DatabaseError("select", str(e), details={"table": kind.table})

    def create(self, kind: DimensionKind, data: DimensionCreate) -> DimensionEntity:
        """
        Create a dimension entity.

        Raises:
            DatabaseError: If the insert fails
        """
        logger.info("creating_dimension", kind=kind.value, name=data.name)

        try:
            result = (
                self.db.table(kind.table)
                .insert(self._insert_payload(kind, data))
                .execute()
            )

            entity = self._row_to_entity(kind, result.data[0])

            logger.info(
                "dimension_created",
                kind=kind.value,
                dimension_id=entity.id,
                name=entity.name
            )

            return entity

        except Exception as e:
            logger.error(
                "create_dimension_failed",
                kind=kind.value,
                name=data.name,
                error=str(e)
            )
            raise DatabaseError("insert", str(e), details={"table": kind.table})

    def build_create(
        self,
        kind: DimensionKind,
        name: str,
        parent_id: Optional[str] = None
    ) -> DimensionCreate:
        """
        Creation data for a name found in an import.

        Units get a symbol (the name if ≤3 chars, else its first
        character) and the default unit type. Taxes get the default rate.
        """
        data = DimensionCreate(name=name, slug=generate_slug(name))

        if kind == DimensionKind.SUB_CATEGORY:
            data.parent_id = parent_id
        elif kind == DimensionKind.UNIT:
            data.symbol = name if len(name) <= 3 else name[0]
            data.type = settings.import_default_unit_type
        elif kind == DimensionKind.TAX:
            data.rate = settings.import_default_tax_rate

        return data

    # ===================
    # RESOLUTION
    # ===================

    def resolve(
        self,
        kind: DimensionKind,
        names: Iterable[str],
        parent_ids: Optional[dict[str, str]] = None,
        create_missing: bool = True
    ) -> DimensionMap:
        """
        Resolve names of one kind to entities.

        Args:
            kind: Dimension kind
            names: Free-text names (trimmed and case-folded for matching)
            parent_ids: For subcategories, normalized name -> parent category id
            create_missing: Write missing entities. When False they are
                            returned as proposed entities with provisional ids.

        Returns:
            DimensionMap with an entry for every distinct normalized name

        Raises:
            DimensionStoreError: If the store cannot be read or written
        """
        wanted: dict[str, str] = {}
        for name in names:
            display = clean_name(name)
            if display is not None:
                wanted.setdefault(display.casefold(), display)

        dimension_map = DimensionMap(kind=kind)
        if not wanted:
            return dimension_map

        existing = self._index(kind, self._list_for_resolution(kind))
        parent_ids = parent_ids or {}

        for key, display in wanted.items():
            if key in existing:
                dimension_map.entities[key] = existing[key]
                continue

            data = self.build_create(kind, display, parent_id=parent_ids.get(key))

            created = True
            if create_missing:
                entity, created = self._create_or_adopt(kind, key, data)
            else:
                entity = DimensionEntity(
                    id=str(uuid4()),
                    name=data.name,
                    slug=data.slug,
                    parent_id=data.parent_id,
                    proposed=True
                )

            dimension_map.entities[key] = entity
            if created:
                dimension_map.created.append(entity)

        logger.info(
            "dimensions_resolved",
            kind=kind.value,
            requested=len(wanted),
            existing=len(wanted) - len(dimension_map.created),
            created=0 if not create_missing else len(dimension_map.created),
            proposed=len(dimension_map.proposed)
        )

        return dimension_map

    def resolve_all(
        self,
        rows: list[NormalizedRow],
        dimension_fields: dict[DimensionKind, str],
        create_missing: bool = True
    ) -> dict[DimensionKind, DimensionMap]:
        """
        Resolve every dimension a row set references.

        One resolution per kind, never per row.

        Args:
            rows: Normalized rows
            dimension_fields: Kind -> canonical field holding its names
            create_missing: See resolve()

        Returns:
            Kind -> DimensionMap
        """
        maps: dict[DimensionKind, DimensionMap] = {}

        for kind in RESOLUTION_ORDER:
            field_name = dimension_fields.get(kind)
            if field_name is None:
                continue

            parent_ids = None
            if kind == DimensionKind.SUB_CATEGORY and DimensionKind.CATEGORY in maps:
                links = collect_parent_links(
                    rows,
                    child_field=field_name,
                    parent_field=dimension_fields[DimensionKind.CATEGORY]
                )
                category_map = maps[DimensionKind.CATEGORY]
                parent_ids = {
                    child: category_map.get_id(parent)
                    for child, parent in links.items()
                }

            maps[kind] = self.resolve(
                kind,
                collect_names(rows, field_name),
                parent_ids=parent_ids,
                create_missing=create_missing
            )

        return maps

    # ===================
    # HELPERS
    # ===================

    def _list_for_resolution(self, kind: DimensionKind) -> list[DimensionEntity]:
        try:
            return self.list_all(kind)
        except DatabaseError as e:
            raise DimensionStoreError(kind.value, e.message)

    def _create_or_adopt(
        self,
        kind: DimensionKind,
        key: str,
        data: DimensionCreate
    ) -> tuple[DimensionEntity, bool]:
        """
        Create an entity; on failure, adopt one created concurrently.

        A failed insert is followed by a single re-read. If another import
        created the same name meanwhile, that entity is used.

        Returns:
            Tuple of (entity, True if this call created it)
        """
        try:
            return self.create(kind, data), True
        except DatabaseError as e:
            existing = self._index(kind, self._list_for_resolution(kind))
            if key in existing:
                logger.warning(
                    "dimension_create_conflict_adopted",
                    kind=kind.value,
                    name=data.name,
                    dimension_id=existing[key].id
                )
                return existing[key], False
            raise DimensionStoreError(kind.value, e.message)

    def _index(
        self,
        kind: DimensionKind,
        entities: list[DimensionEntity]
    ) -> dict[str, DimensionEntity]:
        """Normalized name -> entity. The first of any case-duplicates wins."""
        index: dict[str, DimensionEntity] = {}
        for entity in entities:
            key = name_key(entity.name)
            if key is None:
                continue
            if key in index:
                logger.warning(
                    "duplicate_dimension_in_store",
                    kind=kind.value,
                    name=entity.name,
                    kept_id=index[key].id,
                    ignored_id=entity.id
                )
                continue
            index[key] = entity
        return index

    def _insert_payload(self, kind: DimensionKind, data: DimensionCreate) -> dict:
        """Row to insert for a kind."""
        payload = {
            "name": data.name,
            "slug": data.slug or generate_slug(data.name),
        }

        if kind == DimensionKind.SUB_CATEGORY:
            payload[SUB_CATEGORY_PARENT_COLUMN] = data.parent_id
        elif kind == DimensionKind.UNIT:
            payload["symbol"] = data.symbol
            payload["type"] = data.type
        elif kind == DimensionKind.TAX:
            payload["rate"] = data.rate

        return payload

    def _row_to_entity(self, kind: DimensionKind, row: dict) -> DimensionEntity:
        """Convert database row to DimensionEntity."""
        parent_id = None
        if kind == DimensionKind.SUB_CATEGORY:
            parent_id = row.get(SUB_CATEGORY_PARENT_COLUMN)

        return DimensionEntity(
            id=str(row["id"]),
            name=row["name"],
            slug=row.get("slug") or "",
            parent_id=parent_id,
        )


# Singleton instance
_dimension_service: Optional[DimensionService] = None


def get_dimension_service() -> DimensionService:
    """Get or create DimensionService instance."""
    global _dimension_service
    if _dimension_service is None:
        _dimension_service = DimensionService()
    return _dimension_service
