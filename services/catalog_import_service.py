"""
Catalog import service.

Runs the bulk import pipeline and executes batches:

    raw rows → normalize → resolve dimensions (once per kind)
             → duplicate check → validate & map → preview | save

Preview writes nothing: dimension entities the batch would create come
back as proposed entities. Save creates them, then persists each accepted
row independently; one row's failure never stops the others. Store outages
while resolving dimensions or checking duplicates abort the whole batch.
"""

from typing import Any, Iterable, Mapping, Optional
import structlog

from config import settings
from models.catalog_import import (
    BatchReport,
    CatalogPreviewResponse,
    CatalogSaveResponse,
    ImportFormat,
    InvalidRow,
    OutcomeStatus,
    RejectionReason,
    RowOutcome,
    SaveResult,
    REJECTION_MESSAGES,
)
from models.dimension import DimensionKind
from parsers.catalog_row_normalizer import normalize_rows
from services import preview_cache_service
from services.dimension_service import DimensionMap, DimensionService, get_dimension_service
from services.duplicate_check_service import DuplicateCheckService
from services.product_service import ProductService, get_product_service
from services.row_mapper_service import (
    RowMapperService,
    ValidationProfile,
    get_profile,
)
from exceptions import (
    DatabaseError,
    EmptyImportError,
    ImportTooLargeError,
    PreviewNotFoundError,
)

logger = structlog.get_logger(__name__)


DimensionMaps = Mapping[DimensionKind, DimensionMap]


class CatalogImportService:
    """
    Bulk catalog import.

    Stores are injected for tests; by default the shared services are used.
    """

    def __init__(
        self,
        dimension_service: Optional[DimensionService] = None,
        duplicate_service: Optional[DuplicateCheckService] = None,
        product_service: Optional[ProductService] = None,
        mapper: Optional[RowMapperService] = None
    ):
        self.product_service = product_service or get_product_service()
        self.dimension_service = dimension_service or get_dimension_service()
        self.duplicate_service = duplicate_service or DuplicateCheckService(self.product_service)
        self.mapper = mapper or RowMapperService()

    # ===================
    # PIPELINE
    # ===================

    def build_report(
        self,
        raw_rows: list[Mapping[str, Any]],
        fmt: ImportFormat,
        create_dimensions: bool,
        exclude: Iterable[int] = ()
    ) -> tuple[BatchReport, dict[DimensionKind, DimensionMap]]:
        """
        Run the pipeline up to mapping; nothing is persisted except
        dimension entities when create_dimensions is True.

        Args:
            raw_rows: Rows keyed by source column
            fmt: Import format, selects the validation profile
            create_dimensions: Write missing dimension entities
            exclude: 0-based indices to leave out; the remaining rows keep
                     their original row numbers

        Returns:
            Tuple of (report with one outcome per kept row, dimension maps)

        Raises:
            EmptyImportError / ImportTooLargeError: Batch size out of range
            CatalogImportError: A store is unavailable
        """
        self._check_size(raw_rows)

        excluded = set(exclude)
        kept = [(i, raw) for i, raw in enumerate(raw_rows) if i not in excluded]
        profile = get_profile(fmt)

        logger.info(
            "catalog_import_started",
            format=profile.name,
            rows=len(kept),
            excluded=len(raw_rows) - len(kept),
            create_dimensions=create_dimensions
        )

        rows = normalize_rows([raw for _, raw in kept])

        dimension_maps = self.dimension_service.resolve_all(
            rows,
            profile.dimension_fields,
            create_missing=create_dimensions
        )

        duplicate_positions = self.duplicate_service.find_duplicates(
            rows, required_fields=profile.required_fields
        )
        duplicates = {kept[pos][0] for pos in duplicate_positions}

        outcomes = [
            self.mapper.map_row(
                index,
                row,
                dimension_maps,
                duplicates,
                profile,
                raw=raw
            )
            for (index, raw), row in zip(kept, rows)
        ]

        report = BatchReport(total=len(outcomes), outcomes=outcomes)

        logger.info(
            "catalog_rows_mapped",
            total=report.total,
            valid=report.valid_count,
            invalid=report.invalid_count
        )

        return report, dimension_maps

    def execute(self, report: BatchReport) -> BatchReport:
        """
        Persist every valid row of a report, one at a time.

        Each row is re-checked for duplicates right before its insert.
        Rows rejected earlier become FAILED with their original reason.
        """
        outcomes = []

        for outcome in report.outcomes:
            if outcome.status != OutcomeStatus.VALID:
                outcomes.append(outcome.model_copy(update={"status": OutcomeStatus.FAILED}))
                continue

            outcomes.append(self._persist(outcome))

        executed = BatchReport(total=report.total, outcomes=outcomes)

        logger.info(
            "catalog_batch_executed",
            total=executed.total,
            saved=executed.valid_count,
            failed=executed.invalid_count
        )

        return executed

    # ===================
    # ENTRY POINTS
    # ===================

    def preview(
        self,
        raw_rows: list[Mapping[str, Any]],
        fmt: ImportFormat = ImportFormat.EXCEL,
        cache: bool = True
    ) -> CatalogPreviewResponse:
        """
        Dry run. Returns the report and, if cache is set, a preview_id
        for confirm().
        """
        report, dimension_maps = self.build_report(raw_rows, fmt, create_dimensions=False)
        profile = get_profile(fmt)

        preview_id = None
        if cache:
            preview_id = preview_cache_service.store_preview({
                "rows": [dict(r) for r in raw_rows],
                "format": ImportFormat(fmt).value,
            })

        response = CatalogPreviewResponse(
            preview_id=preview_id,
            preview_products=[
                self._display(o.product, dimension_maps, profile)
                for o in report.outcomes if o.accepted
            ],
            invalid_rows=self._invalid_rows(report),
            proposed_dimensions={
                kind.value: [e.to_ref() for e in dimension_map.proposed]
                for kind, dimension_map in dimension_maps.items()
                if dimension_map.proposed
            },
            total=report.total,
            valid=report.valid_count,
            invalid=report.invalid_count,
            expires_in_minutes=settings.preview_ttl_minutes if preview_id else None,
        )

        logger.info(
            "catalog_preview_complete",
            preview_id=preview_id,
            total=response.total,
            valid=response.valid,
            invalid=response.invalid,
            proposed_dimensions=sum(len(v) for v in response.proposed_dimensions.values())
        )

        return response

    def save(
        self,
        raw_rows: list[Mapping[str, Any]],
        fmt: ImportFormat = ImportFormat.CSV,
        exclude: Iterable[int] = ()
    ) -> CatalogSaveResponse:
        """Import rows: create missing dimensions, then persist each row."""
        report, dimension_maps = self.build_report(
            raw_rows, fmt, create_dimensions=True, exclude=exclude
        )
        executed = self.execute(report)
        return self._save_response(executed, dimension_maps, get_profile(fmt))

    def confirm(
        self,
        preview_id: str,
        excluded_rows: Iterable[int] = ()
    ) -> CatalogSaveResponse:
        """
        Save a cached preview.

        Args:
            preview_id: Id returned by preview()
            excluded_rows: User-facing row numbers to leave out

        Raises:
            PreviewNotFoundError: If the preview expired or never existed
        """
        cached = preview_cache_service.retrieve_preview(preview_id)
        if cached is None:
            raise PreviewNotFoundError(preview_id)

        exclude = {row - self.mapper.header_offset for row in excluded_rows}

        logger.info(
            "catalog_preview_confirming",
            preview_id=preview_id,
            excluded=len(exclude)
        )

        response = self.save(
            cached["rows"],
            ImportFormat(cached["format"]),
            exclude=exclude
        )

        preview_cache_service.delete_preview(preview_id)
        return response

    # ===================
    # HELPERS
    # ===================

    def _check_size(self, raw_rows: list) -> None:
        if not raw_rows:
            raise EmptyImportError()
        if len(raw_rows) > settings.import_max_rows:
            raise ImportTooLargeError(len(raw_rows), settings.import_max_rows)

    def _persist(self, outcome: RowOutcome) -> RowOutcome:
        """Insert one candidate, recording success or the failure reason."""
        product = outcome.product

        try:
            if self.duplicate_service.is_duplicate(product.name, product.slug):
                logger.info("catalog_row_duplicate_on_save", row=outcome.row, name=product.name)
                return outcome.model_copy(update={
                    "status": OutcomeStatus.FAILED,
                    "reason": RejectionReason.DUPLICATE_NAME_OR_SLUG,
                    "message": REJECTION_MESSAGES[RejectionReason.DUPLICATE_NAME_OR_SLUG],
                })

            saved = self.product_service.create(product)

        except DatabaseError as e:
            logger.warning(
                "catalog_row_save_failed",
                row=outcome.row,
                name=product.name,
                error=e.message
            )
            return outcome.model_copy(update={
                "status": OutcomeStatus.FAILED,
                "reason": RejectionReason.PERSISTENCE_ERROR,
                "message": e.message,
            })

        return outcome.model_copy(update={
            "status": OutcomeStatus.SAVED,
            "product": saved,
            "product_id": saved.id,
        })

    def _display(
        self,
        product,
        dimension_maps: DimensionMaps,
        profile: ValidationProfile
    ) -> dict[str, Any]:
        """Product as JSON with dimension ids expanded to {id, name, slug}."""
        data = product.model_dump(mode="json")

        for kind, field_name in profile.candidate_fields.items():
            dimension_map = dimension_maps.get(kind)
            entity = dimension_map.by_id(data.get(field_name)) if dimension_map else None
            if entity is not None:
                data[field_name] = entity.to_ref().model_dump(mode="json")

        return data

    def _invalid_rows(self, report: BatchReport) -> list[InvalidRow]:
        return [
            InvalidRow(
                row=o.row,
                reason=o.reason,
                message=o.message or REJECTION_MESSAGES[o.reason],
                data=o.data
            )
            for o in report.outcomes if not o.accepted
        ]

    def _save_response(
        self,
        report: BatchReport,
        dimension_maps: DimensionMaps,
        profile: ValidationProfile
    ) -> CatalogSaveResponse:
        results = [
            SaveResult(
                row=o.row,
                index=o.index,
                status=o.status,
                reason=o.reason,
                message=o.message,
                product=self._display(o.product, dimension_maps, profile) if o.accepted else None,
            )
            for o in report.outcomes
        ]

        response = CatalogSaveResponse(
            message="Bulk save complete",
            results=results,
            failures=self._invalid_rows(report),
            total=report.total,
            success=report.valid_count,
            failed=report.invalid_count,
        )

        logger.info(
            "catalog_save_complete",
            total=response.total,
            success=response.success,
            failed=response.failed
        )

        return response


# Singleton instance
_catalog_import_service: Optional[CatalogImportService] = None


def get_catalog_import_service() -> CatalogImportService:
    """Get or create CatalogImportService instance."""
    global _catalog_import_service
    if _catalog_import_service is None:
        _catalog_import_service = CatalogImportService()
    return _catalog_import_service
