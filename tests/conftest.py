"""In-memory stand-ins for the repositories, injected through service constructors."""
import copy
from datetime import datetime

import pytest
from bson import ObjectId

from onboarding.config.constants import REPORT_KINDS
from onboarding.repositories.users.identity_repo import CURRENT, LEGACY
from onboarding.utils.validation.input_validator import to_object_id


def matches(doc, query):
    """Equality plus the $in / $ne / $or operators the services use"""
    for key, cond in query.items():
        if key == "$or":
            if not any(matches(doc, clause) for clause in cond):
                return False
            continue
        value = doc.get(key)
        if isinstance(cond, dict) and any(k.startswith("$") for k in cond):
            if "$in" in cond and value not in cond["$in"]:
                return False
            if "$ne" in cond and value == cond["$ne"]:
                return False
        elif value != cond:
            return False
    return True


class InMemoryIdentities:
    def __init__(self, legacy_retired=False):
        self.docs = {LEGACY: [], CURRENT: []}
        self.legacy_retired = legacy_retired

    def add(self, source, **fields):
        doc = {"_id": ObjectId(), **fields}
        self.docs[source].append(doc)
        return doc

    def sources(self):
        return (CURRENT,) if self.legacy_retired else (LEGACY, CURRENT)

    def _first(self, source, predicate):
        for doc in self.docs[source]:
            if predicate(doc):
                return copy.deepcopy(doc)
        return None

    def find_by_author_id(self, author_id):
        wanted = author_id.strip()
        return {
            source: self._first(source, lambda d: str(d.get("author_id") or "").strip() == wanted)
            for source in self.sources()
        }

    def find_by_author_ids(self, author_ids):
        wanted = {a.strip() for a in author_ids if a and a.strip()}
        return {
            source: [copy.deepcopy(d) for d in self.docs[source] if str(d.get("author_id") or "").strip() in wanted]
            for source in self.sources()
        }

    def find_by_id(self, user_id):
        oid = to_object_id(user_id)
        for source in reversed(self.sources()):
            doc = self._first(source, lambda d: d["_id"] == oid)
            if doc:
                return source, doc
        return None, None

    def find_by_email(self, source, email, projection=None):
        if not email:
            return None
        return self._first(source, lambda d: str(d.get("email") or "").lower() == email.strip().lower())

    def email_exists(self, email):
        return any(self.find_by_email(source, email) for source in self.sources())

    def find_many(self, query):
        return {
            source: [copy.deepcopy(d) for d in self.docs[source] if matches(d, query)]
            for source in self.sources()
        }

    def find_by_ids(self, ids):
        oids = [oid for oid in (to_object_id(i) for i in ids) if oid is not None]
        return self.find_many({"_id": {"$in": oids}})

    def update_by_id(self, source, user_id, fields):
        oid = to_object_id(user_id)
        for doc in self.docs[source]:
            if doc["_id"] == oid:
                doc.update(copy.deepcopy(fields))
                return True
        return False

    def update_by_email(self, source, email, fields):
        for doc in self.docs[source]:
            if email and str(doc.get("email") or "").lower() == email.strip().lower():
                doc.update(copy.deepcopy(fields))
                return True
        return False

    def update_many(self, source, query, fields):
        count = 0
        for doc in self.docs[source]:
            if matches(doc, query):
                doc.update(copy.deepcopy(fields))
                count += 1
        return count

    def insert(self, source, document):
        doc = dict(document, _id=ObjectId())
        self.docs[source].append(doc)
        return doc["_id"]

    def iter_legacy(self):
        return [copy.deepcopy(d) for d in self.docs[LEGACY]]

    def get(self, source, user_id):
        return next(d for d in self.docs[source] if d["_id"] == user_id)


class InMemoryReports:
    def __init__(self, kind):
        self.kind = kind
        self.docs = []
        self.replaced = []

    def add(self, author_id, report_data, user=None, **extra):
        doc = {
            "_id": ObjectId(),
            "kind": self.kind,
            "author_id": author_id,
            "user": user,
            "reportData": report_data,
            "uploadedAt": datetime(2025, 11, 1),
            "lastUpdatedAt": datetime(2025, 11, 1),
            **extra,
        }
        self.docs.append(doc)
        return doc

    def by_author(self, author_id):
        return next((d for d in self.docs if d["author_id"] == author_id), None)

    def find_by_author_id(self, author_id):
        return copy.deepcopy(self.by_author(author_id))

    def find_by_author_ids(self, author_ids):
        ids = set(author_ids)
        return {d["author_id"]: copy.deepcopy(d) for d in self.docs if d["author_id"] in ids}

    def find_for_candidate(self, user_id, author_id):
        oid = to_object_id(user_id)
        for doc in self.docs:
            if doc["author_id"] == author_id or (oid is not None and doc.get("user") == oid):
                return copy.deepcopy(doc)
        return None

    def find_for_candidates(self, user_ids, author_ids):
        oids = {to_object_id(u) for u in user_ids}
        authors = set(author_ids)
        return [copy.deepcopy(d) for d in self.docs if d.get("user") in oids or d["author_id"] in authors]

    def find_all(self):
        return copy.deepcopy(self.docs)

    def latest_for_author(self, author_id):
        docs = sorted((d for d in self.docs if d["author_id"] == author_id), key=lambda d: d["uploadedAt"])
        return copy.deepcopy(docs[-1]) if docs else None

    def build_document(self, author_id, user_id, payload, uploaded_by):
        now = datetime.utcnow()
        return {
            "kind": self.kind,
            "author_id": author_id,
            "user": to_object_id(user_id),
            "reportData": payload,
            "uploadedBy": uploaded_by,
            "uploadedAt": now,
            "lastUpdatedAt": now,
        }

    def create_bulk(self, documents):
        for document in documents:
            self.docs.append(dict(document, _id=ObjectId()))
        return len(documents)

    def replace_payload(self, author_id, payload, uploaded_by, user_id=None):
        doc = self.by_author(author_id)
        if doc is None:
            return False
        doc.update({"reportData": payload, "uploadedBy": uploaded_by})
        self.replaced.append(author_id)
        return True

    def upsert_payload(self, author_id, user_id, payload, uploaded_by):
        doc = self.by_author(author_id)
        if doc is None:
            self.create_bulk([self.build_document(author_id, user_id, payload, uploaded_by)])
            return True
        doc.update({"reportData": payload, "uploadedBy": uploaded_by})
        return False

    def update_record(self, record_id, payload, author_id, user_id=None):
        for doc in self.docs:
            if doc["_id"] == record_id:
                doc.update({"reportData": payload, "author_id": author_id})
                if user_id is not None:
                    doc["user"] = to_object_id(user_id)
                return True
        return False


class InMemoryAttendance:
    def __init__(self):
        self.docs = []

    def find_for_day(self, user_id, day):
        oid = to_object_id(user_id)
        return next((copy.deepcopy(d) for d in self.docs if d["user"] == oid and d["date"] == day), None)

    def find_by_id(self, record_id):
        oid = to_object_id(record_id)
        return next((copy.deepcopy(d) for d in self.docs if d["_id"] == oid), None)

    def create(self, user_id, day, fields):
        document = {"_id": ObjectId(), "user": to_object_id(user_id), "date": day, **fields}
        self.docs.append(document)
        return copy.deepcopy(document)

    def update_fields(self, record_id, fields):
        for doc in self.docs:
            if doc["_id"] == record_id:
                doc.update(fields)
                return True
        return False

    def history(self, user_id, start, end, page, limit):
        oid = to_object_id(user_id)
        records = [
            d for d in self.docs
            if d["user"] == oid and (start is None or d["date"] >= start) and (end is None or d["date"] <= end)
        ]
        records.sort(key=lambda d: d["date"], reverse=True)
        return records[(page - 1) * limit:page * limit], len(records)

    def for_users(self, user_ids, day=None):
        oids = {to_object_id(u) for u in user_ids}
        return [d for d in self.docs if d["user"] in oids and (day is None or d["date"] == day)]

    def count_present(self, user_id, start, end):
        oid = to_object_id(user_id)
        return sum(
            1 for d in self.docs
            if d["user"] == oid and start <= d["date"] <= end and d.get("status") == "present"
        )


class InMemoryJoiners:
    def __init__(self):
        self.docs = []
        self.last_list = None
        self.aggregations = []

    def add(self, **fields):
        doc = {"_id": ObjectId(), **fields}
        self.docs.append(doc)
        return doc

    def find_by_id(self, joiner_id):
        oid = to_object_id(joiner_id)
        for doc in self.docs:
            if (oid is not None and doc["_id"] == oid) or (oid is None and doc.get("author_id") == joiner_id):
                return copy.deepcopy(doc)
        return None

    def find_by_email(self, email, exclude_id=None):
        for doc in self.docs:
            if str(doc.get("email") or "").lower() == email.strip().lower() and doc["_id"] != exclude_id:
                return copy.deepcopy(doc)
        return None

    def find_for_candidate(self, author_id, email):
        for doc in self.docs:
            if doc.get("author_id") == author_id:
                return copy.deepcopy(doc)
        return self.find_by_email(email) if email else None

    def find_by_email_or_name(self, email, name):
        for doc in self.docs:
            if (email and str(doc.get("email") or "").lower() == email.lower()) or (name and doc.get("name") == name):
                return copy.deepcopy(doc)
        return None

    def find_many(self, query, sort=None):
        return [copy.deepcopy(d) for d in self.docs if matches(d, query)]

    def list_page(self, query, sort, page, limit):
        self.last_list = (query, sort, page, limit)
        return copy.deepcopy(self.docs), len(self.docs)

    def insert_one(self, document):
        oid = ObjectId()
        self.docs.append(dict(document, _id=oid))
        return oid

    def update_fields(self, joiner_id, fields):
        for doc in self.docs:
            if doc["_id"] == joiner_id:
                doc.update(fields)
                return True
        return False

    def delete(self, joiner_id):
        before = len(self.docs)
        self.docs = [d for d in self.docs if d["_id"] != joiner_id]
        return len(self.docs) < before

    def aggregate(self, pipeline):
        self.aggregations.append(pipeline)
        return []


class InMemoryEvents:
    def __init__(self):
        self.docs = []

    def append(self, event_type, payload):
        event = {
            "_id": ObjectId(),
            "type": event_type,
            "payload": payload,
            "status": "pending",
            "attempts": 0,
            "lastError": None,
        }
        self.docs.append(event)
        return dict(event)

    def _get(self, event_id):
        return next(d for d in self.docs if d["_id"] == event_id)

    def mark_applied(self, event_id):
        event = self._get(event_id)
        event.update({"status": "applied", "lastError": None, "attempts": event["attempts"] + 1})
        return True

    def mark_failed(self, event_id, error):
        event = self._get(event_id)
        event.update({"status": "failed", "lastError": error, "attempts": event["attempts"] + 1})
        return True

    def retryable(self, max_attempts, limit):
        return [
            dict(d) for d in self.docs
            if d["status"] in ("pending", "failed") and d["attempts"] < max_attempts
        ][:limit]


class RecordingPublisher:
    def __init__(self):
        self.events = []

    def emit(self, event_type, payload):
        self.events.append((event_type, payload))
        return {"type": event_type, "payload": payload}

    def types(self):
        return [event_type for event_type, _ in self.events]


@pytest.fixture
def identities():
    return InMemoryIdentities()


@pytest.fixture
def report_repos():
    return {kind: InMemoryReports(kind) for kind in REPORT_KINDS}


@pytest.fixture
def attendance_repo():
    return InMemoryAttendance()


@pytest.fixture
def joiners():
    return InMemoryJoiners()


@pytest.fixture
def events():
    return InMemoryEvents()


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def trainer_and_trainee(identities):
    """An active trainer in the current collection with one assigned trainee"""
    trainee = identities.add(CURRENT, name="Asha", email="asha@example.com", author_id="A1", role="trainee")
    trainer = identities.add(
        CURRENT, name="Ravi", email="ravi@example.com", author_id="T1", role="trainer",
        assignedTrainees=[trainee["_id"]],
    )
    trainee["assignedTrainer"] = trainer["_id"]
    return trainer, trainee
