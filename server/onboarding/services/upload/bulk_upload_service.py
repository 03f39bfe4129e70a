"""
Bulk Upload Coordinator

Received -> Validated -> Resolved -> Persisted -> Reported

A batch is validated up front (selector, data source), every author_id in it is
resolved with one batched identity lookup, each row's report payloads are
normalised per kind, and the results are persisted per kind with one bulk
insert for new records and isolated per-record updates for existing ones.
Row problems are collected into the response instead of failing the batch.
"""
from typing import Any, Dict, List, Optional, Tuple
from onboarding.config.constants import LEARNING_SUB_SHEETS, REPORT_KINDS, SHEET_KINDS
from onboarding.exceptions.exceptions import ValidationError
from onboarding.logging_logs.log_config import get_logger
from onboarding.models.report_schemas import get_schema
from onboarding.repositories.core.repository_factory import RepositoryFactory
from onboarding.services.identity.identity_merger import candidate_summary
from onboarding.services.identity.identity_service import IdentityService
from onboarding.services.upload.sheet_fetcher import SheetFetcher
from onboarding.utils.processing.parallel_processor import ParallelProcessor
from onboarding.utils.validation.input_validator import parse_id_list

logger = get_logger("services.bulk_upload")

SELECT_ALL = "all"

class UploadSelection:
    """Which report kinds a batch writes, and which learning sub-sheets feed it"""

    def __init__(self, kinds: Tuple[str, ...], learning_sheets: Optional[List[str]]):
        self.kinds = kinds
        self.learning_sheets = learning_sheets

    @classmethod
    def parse(cls, raw) -> "UploadSelection":
        names = parse_id_list(raw)
        if not names:
            raise ValidationError("data_sets_to_be_loaded must name at least one sheet")
        if any(name.lower() == SELECT_ALL for name in names):
            return cls(REPORT_KINDS, None)

        unknown = [name for name in names if name not in SHEET_KINDS]
        if unknown:
            raise ValidationError(
                f"Unknown data sets: {', '.join(unknown)}",
                details={"allowed": sorted(SHEET_KINDS) + [SELECT_ALL]},
            )
        kinds = tuple(kind for kind in REPORT_KINDS if kind in {SHEET_KINDS[n] for n in names})
        return cls(kinds, [n for n in names if n in LEARNING_SUB_SHEETS])

class BulkUploadService:
    def __init__(self, identity_service=None, report_repos: Optional[Dict] = None, fetcher=None):
        self.identity_service = identity_service or IdentityService()
        self.report_repos = report_repos or RepositoryFactory.get_report_repos()
        self.fetcher = fetcher or SheetFetcher()

    # ---- Received / Validated ----

    def _validate_request(self, data: Dict) -> UploadSelection:
        if not data.get("spread_sheet_name") or not data.get("data_sets_to_be_loaded"):
            raise ValidationError("spread_sheet_name and data_sets_to_be_loaded are required")
        return UploadSelection.parse(data["data_sets_to_be_loaded"])

    def _load_rows(self, data: Dict, author_id: Optional[str] = None) -> List[Any]:
        url = (data.get("google_sheet_url") or "").strip()
        inline = data.get("candidate_reports_data")

        if url:
            rows = self.fetcher.fetch(url, author_id=author_id)
        elif isinstance(inline, list):
            rows = inline
            if author_id:
                rows = [r for r in rows if isinstance(r, dict) and str(r.get("author_id", "")).strip() == author_id]
        else:
            raise ValidationError("Either google_sheet_url or candidate_reports_data must be provided")

        if not rows:
            raise ValidationError("No candidate reports data found")
        return rows

    # ---- Resolved ----

    def _plan(self, rows: List[Any], selection: UploadSelection) -> Tuple[Dict, List[Dict], List[str], int]:
        """
        Resolve identities and normalise payloads.

        Returns ({kind: {author_id: (user_id, payload)}}, processed, errors, skipped).
        A later row for the same author_id replaces an earlier one.
        """
        author_ids = [
            str(row.get("author_id")).strip()
            for row in rows
            if isinstance(row, dict) and row.get("author_id")
        ]
        users = self.identity_service.resolve_many(author_ids)

        plan: Dict[str, Dict[str, Tuple]] = {kind: {} for kind in selection.kinds}
        processed, errors = [], []
        skipped = 0

        for index, row in enumerate(rows, start=1):
            if not isinstance(row, dict):
                errors.append(f"Row {index}: row must be an object")
                skipped += 1
                continue

            author_id = str(row.get("author_id") or "").strip()
            if not author_id:
                source = f" ({row['sourceSheet']} row {row['sourceRow']})" if row.get("sourceSheet") else ""
                errors.append(f"Row {index}{source}: author_id is required")
                skipped += 1
                continue

            user = users.get(author_id)
            if user is None:
                errors.append(f"Row {index}: User not found with author_id {row.get('author_id')}")
                skipped += 1
                continue

            planned_kinds = []
            for kind in selection.kinds:
                schema = get_schema(kind)
                payload = schema.extract(row)
                if payload is None:
                    continue
                try:
                    normalized = schema.normalize(payload, selection.learning_sheets)
                except ValidationError as e:
                    errors.append(f"Row {index}: {kind} report skipped: {str(e)}")
                    continue
                if schema.is_empty(normalized):
                    continue
                plan[kind][author_id] = (user.get("_id"), normalized)
                planned_kinds.append(kind)

            if planned_kinds:
                summary = candidate_summary(user)
                summary["author_id"] = author_id
                processed.append(summary)
            else:
                skipped += 1

        return plan, processed, errors, skipped

    # ---- Persisted ----

    def _persist_kind(self, kind: str, entries: Dict[str, Tuple], existing: Dict, uploaded_by) -> Dict:
        repo = self.report_repos[kind]
        outcome = {"created": 0, "updated": 0, "errors": []}

        new_docs = [
            repo.build_document(author_id, user_id, payload, uploaded_by)
            for author_id, (user_id, payload) in entries.items()
            if author_id not in existing
        ]
        if new_docs:
            outcome["created"] = repo.create_bulk(new_docs)

        updates = [(author_id, entry) for author_id, entry in entries.items() if author_id in existing]
        results = ParallelProcessor.map_isolated(
            lambda item: repo.replace_payload(item[0], item[1][1], uploaded_by, user_id=item[1][0]),
            updates,
        )
        for (author_id, _), _, error in results:
            if error is not None:
                logger.warning(f"{kind} report update failed for {author_id}: {str(error)}")
                outcome["errors"].append(f"{kind} report for {author_id}: {str(error)}")
            else:
                outcome["updated"] += 1
        return outcome

    def _persist(self, plan: Dict[str, Dict], uploaded_by) -> Tuple[int, int, List[str]]:
        kinds = [kind for kind, entries in plan.items() if entries]
        lookups = ParallelProcessor.map_isolated(
            lambda k: self.report_repos[k].find_by_author_ids(plan[k].keys()), kinds
        )

        created = updated = 0
        errors: List[str] = []
        for kind, existing, lookup_error in lookups:
            try:
                if lookup_error is not None:
                    raise lookup_error
                outcome = self._persist_kind(kind, plan[kind], existing or {}, uploaded_by)
            except Exception as e:
                # No rollback: kinds already written stay written
                logger.error(f"{kind} reports batch failed: {str(e)}")
                errors.append(f"{kind} reports: {str(e)}")
                continue
            created += outcome["created"]
            updated += outcome["updated"]
            errors.extend(outcome["errors"])
        return created, updated, errors

    # ---- Reported ----

    def _run(self, rows: List[Any], selection: UploadSelection, uploaded_by) -> Dict:
        plan, processed, errors, skipped = self._plan(rows, selection)
        created, updated, batch_errors = self._persist(plan, uploaded_by)
        errors.extend(batch_errors)

        logger.info(
            f"Bulk upload: rows={len(rows)} processed={len(processed)} created={created} "
            f"updated={updated} skipped={skipped} errors={len(errors)}"
        )
        return {
            "success": True,
            "message": f"Successfully processed {len(processed)} candidate reports",
            "createdCount": created,
            "updatedCount": updated,
            "skippedCount": skipped,
            "totalProcessed": len(processed),
            "errors": errors,
            "processedReports": processed,
        }

    # ---- public operations ----

    def bulk_upload(self, data: Dict, uploaded_by) -> Dict:
        selection = self._validate_request(data)
        rows = self._load_rows(data)
        return self._run(rows, selection, uploaded_by)

    def upload_candidate(self, author_id: str, data: Dict, uploaded_by) -> Dict:
        """Same pipeline restricted to one candidate's rows"""
        author_id = (author_id or "").strip()
        self.identity_service.resolve(author_id)
        if not data.get("data_sets_to_be_loaded"):
            data = dict(data, data_sets_to_be_loaded=SELECT_ALL)
        if not data.get("spread_sheet_name"):
            data = dict(data, spread_sheet_name=author_id)
        selection = self._validate_request(data)
        rows = self._load_rows(data, author_id=author_id)
        return self._run(rows, selection, uploaded_by)

    def validate_sheets(self, data: Dict) -> Dict:
        """Dry run: resolve and normalise every row without writing anything"""
        selection = self._validate_request(data)
        rows = self._load_rows(data)
        plan, processed, errors, skipped = self._plan(rows, selection)

        reports_by_author: Dict[str, List[str]] = {}
        for kind, entries in plan.items():
            for author_id in entries:
                reports_by_author.setdefault(author_id, []).append(kind)

        valid_rows = [
            dict(candidate, reports=reports_by_author.get(candidate["author_id"], []))
            for candidate in processed
        ]
        return {
            "success": True,
            "message": f"{len(valid_rows)} of {len(rows)} rows are ready to upload",
            "totalRows": len(rows),
            "validRows": valid_rows,
            "skippedCount": skipped,
            "errors": errors,
        }

    def upsert_report(self, author_id: str, kind: str, payload: Any, uploaded_by) -> Dict:
        """Create or replace one report kind for one candidate"""
        schema = get_schema(kind)
        user = self.identity_service.resolve(author_id)
        author_id = author_id.strip()

        normalized = schema.normalize(payload)
        if schema.is_empty(normalized):
            raise ValidationError(f"{kind} report is empty")

        created = self.report_repos[kind].upsert_payload(author_id, user.get("_id"), normalized, uploaded_by)
        logger.info(f"{kind} report {'created' if created else 'updated'} for {author_id}")
        return {
            "success": True,
            "message": f"{kind.capitalize()} report {'created' if created else 'updated'} successfully",
            "created": created,
            "author_id": author_id,
            "kind": kind,
        }

    def validate_author_id(self, author_id: str) -> Dict:
        return self.identity_service.validate_author_id(author_id)
