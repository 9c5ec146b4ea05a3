# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false

"""
Tests for the storage, search and service layers, without HTTP.
"""

import json
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from unittest.mock import MagicMock, patch

import pytest

from app.core.errors import InvalidInputError, PersistenceError, VolunteerNotFoundError
from app.core.logging import JSONFormatter
from app.models.domain import SearchQuery, Volunteer
from app.repositories.volunteer_repository import DEFAULT_VOLUNTEERS, JsonVolunteerRepository
from app.services import volunteer_service
from app.services.search import search
from app.services.volunteer_service import VolunteerService, validate_volunteer


def _volunteer(**overrides):
    fields = {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "contact_number": "07700 900999",
        "email": "ada@example.org",
        "role": "Treasurer",
        "skills": ["Maths"],
        "active": True,
    }
    fields.update(overrides)
    return Volunteer(**fields)


# ============================================
# Fixtures
# ============================================
@pytest.fixture
def mirror_path(tmp_path):
    return tmp_path / "volunteers.json"


@pytest.fixture
def repo(mirror_path):
    repository = JsonVolunteerRepository(mirror_path, seed_defaults=False)
    repository.load()
    return repository


@pytest.fixture
def service(repo):
    return VolunteerService(repo)


@pytest.fixture
def accountant():
    return _volunteer(
        first_name="Grace", role="Accountant", skills=["Integrity"], active=False,
    )


@pytest.fixture
def greeter():
    return _volunteer(
        first_name="Marcus", role="Greeter", skills=["Warmth"], active=True,
    )


# ============================================
# Loading & seeding
# ============================================
class TestLoad:
    def test_absent_mirror_is_seeded_and_persisted(self, mirror_path):
        repo = JsonVolunteerRepository(mirror_path)
        assert repo.load() == len(DEFAULT_VOLUNTEERS) == 5
        on_disk = json.loads(mirror_path.read_text())
        assert len(on_disk) == 5
        assert len({r["id"] for r in on_disk}) == 5
        assert [r["id"] for r in on_disk] == [v.id for v in repo.find_all()]

    def test_seed_has_mixed_activity(self, mirror_path):
        repo = JsonVolunteerRepository(mirror_path)
        repo.load()
        flags = {v.active for v in repo.find_all()}
        assert flags == {True, False}

    def test_empty_file_is_seeded(self, mirror_path):
        mirror_path.write_text("")
        repo = JsonVolunteerRepository(mirror_path)
        assert repo.load() == 5

    def test_existing_mirror_is_not_reseeded(self, mirror_path):
        first = JsonVolunteerRepository(mirror_path)
        first.load()
        ids = [v.id for v in first.find_all()]
        second = JsonVolunteerRepository(mirror_path)
        second.load()
        assert [v.id for v in second.find_all()] == ids

    def test_corrupt_mirror_degrades_to_empty_and_is_kept(self, mirror_path):
        mirror_path.write_text("{not json")
        repo = JsonVolunteerRepository(mirror_path)
        assert repo.load() == 0
        assert repo.load_error is not None
        backup = mirror_path.with_name("volunteers.json.corrupt")
        assert backup.read_text() == "{not json"

    def test_non_array_mirror_is_corrupt(self, mirror_path):
        mirror_path.write_text('{"id": "x"}')
        repo = JsonVolunteerRepository(mirror_path)
        assert repo.load() == 0
        assert "array" in repo.load_error

    def test_unreadable_mirror_raises(self, tmp_path):
        # a directory cannot be read as a file
        repo = JsonVolunteerRepository(tmp_path)
        with pytest.raises(PersistenceError):
            repo.load()

    def test_non_utf8_mirror_is_corrupt(self, mirror_path):
        mirror_path.write_bytes(b'[{"firstName": "\xff\xfe"}]')
        repo = JsonVolunteerRepository(mirror_path)
        assert repo.load() == 0
        assert repo.load_error.startswith("UnicodeDecodeError")
        assert mirror_path.with_name("volunteers.json.corrupt").exists()

    def test_corrupt_mirror_stays_empty_after_restart(self, mirror_path):
        mirror_path.write_text("{not json")
        first = JsonVolunteerRepository(mirror_path)
        assert first.load() == 0
        assert json.loads(mirror_path.read_text()) == []

        restarted = JsonVolunteerRepository(mirror_path)
        assert restarted.load() == 0
        assert restarted.count() == 0
        assert restarted.load_error is None

    def test_null_skills_load_as_empty(self, mirror_path):
        mirror_path.write_text(json.dumps([
            {"id": "v1", "firstName": "Ada", "skills": None, "active": True},
        ]))
        repo = JsonVolunteerRepository(mirror_path)
        assert repo.load() == 1
        assert repo.load_error is None
        assert repo.find_by_id("v1").skills == []


# ============================================
# Repository CRUD
# ============================================
class TestRepository:
    def test_round_trip_through_mirror(self, repo, mirror_path):
        saved = repo.save(_volunteer(
            date_of_birth=date(1990, 12, 10), date_joined=date(2024, 2, 1),
        ))
        reloaded = JsonVolunteerRepository(mirror_path, seed_defaults=False)
        reloaded.load()
        assert reloaded.find_by_id(saved.id) == saved

    def test_mirror_uses_camel_case(self, repo, mirror_path):
        repo.save(_volunteer())
        record = json.loads(mirror_path.read_text())[0]
        assert record["firstName"] == "Ada"
        assert record["contactNumber"] == "07700 900999"
        assert record["active"] is True

    def test_save_upserts_in_place(self, repo, accountant, greeter):
        repo.save(accountant)
        repo.save(greeter)
        accountant.role = "Auditor"
        repo.save(accountant)
        volunteers = repo.find_all()
        assert [v.id for v in volunteers] == [accountant.id, greeter.id]
        assert volunteers[0].role == "Auditor"

    def test_save_copies_skills_in(self, repo):
        skills = ["Maths"]
        saved = repo.save(_volunteer(skills=skills))
        skills.append("Chess")
        assert repo.find_by_id(saved.id).skills == ["Maths"]

    def test_reads_copy_out(self, repo):
        saved = repo.save(_volunteer())
        fetched = repo.find_by_id(saved.id)
        fetched.skills.append("Chess")
        fetched.first_name = "Changed"
        stored = repo.find_by_id(saved.id)
        assert stored.skills == ["Maths"]
        assert stored.first_name == "Ada"

    def test_find_by_id_missing_returns_none(self, repo):
        assert repo.find_by_id("missing") is None

    def test_delete_matches_by_identity(self, repo, mirror_path, greeter):
        repo.save(greeter)
        lookalike = Volunteer(id=greeter.id)
        assert repo.delete(lookalike) is True
        assert repo.count() == 0
        assert json.loads(mirror_path.read_text()) == []

    def test_delete_missing_is_noop(self, repo, greeter):
        assert repo.delete(greeter) is False

    def test_find_by_skills_is_any_match(self, repo, accountant, greeter):
        repo.save(accountant)
        repo.save(greeter)
        found = repo.find_by_skills(["Warmth", "Juggling"])
        assert [v.id for v in found] == [greeter.id]

    def test_find_by_skills_is_case_sensitive(self, repo, greeter):
        repo.save(greeter)
        assert repo.find_by_skills(["warmth"]) == []

    def test_find_by_is_active(self, repo, accountant, greeter):
        repo.save(accountant)
        repo.save(greeter)
        assert [v.id for v in repo.find_by_is_active(False)] == [accountant.id]
        assert [v.id for v in repo.find_by_is_active(True)] == [greeter.id]

    def test_no_temp_files_left_behind(self, repo, mirror_path):
        repo.save(_volunteer())
        assert [p.name for p in mirror_path.parent.iterdir()] == ["volunteers.json"]


# ============================================
# Search engine
# ============================================
class TestSearch:
    def test_scenario_skill_active_role(self, accountant, greeter):
        query = SearchQuery(skills=["Integrity"], active=False, role="Accountant")
        assert search([accountant, greeter], query) == [accountant]

    def test_scenario_active_without_skills(self, accountant, greeter):
        query = SearchQuery(skills=[], active=True)
        assert search([accountant, greeter], query) == [greeter]

    def test_absent_skills_match_everything_in_state(self, accountant, greeter):
        assert search([accountant, greeter], SearchQuery(active=False)) == [accountant]

    def test_role_scoped_query_skips_roleless_records(self, greeter):
        roleless = _volunteer(role=None, skills=["Warmth"])
        query = SearchQuery(skills=["Warmth"], active=True, role="Greeter")
        assert search([roleless, greeter], query) == [greeter]

    def test_role_is_exact(self, greeter):
        assert search([greeter], SearchQuery(active=True, role="greeter")) == []

    def test_preserves_input_order(self):
        first = _volunteer(first_name="One")
        second = _volunteer(first_name="Two")
        assert search([second, first], SearchQuery(active=True)) == [second, first]


# ============================================
# Validation
# ============================================
class TestValidation:
    @pytest.mark.parametrize("field", ["first_name", "last_name", "contact_number", "email"])
    def test_missing_field_rejected(self, field):
        with pytest.raises(InvalidInputError) as exc_info:
            validate_volunteer(_volunteer(**{field: None}))
        assert exc_info.value.field == field

    @pytest.mark.parametrize("field", ["first_name", "last_name", "contact_number", "email"])
    def test_blank_field_rejected(self, field):
        with pytest.raises(InvalidInputError):
            validate_volunteer(_volunteer(**{field: "  "}))

    @pytest.mark.parametrize("email", ["plainaddress", "@example.org", "a b@example.org", "ada@"])
    def test_malformed_email_rejected(self, email):
        with pytest.raises(InvalidInputError, match="Invalid email format"):
            validate_volunteer(_volunteer(email=email))

    @pytest.mark.parametrize("email", ["ada@example.org", "a.b+c_d-e@x", "A1@sub.example.co.uk"])
    def test_valid_email_accepted(self, email):
        validate_volunteer(_volunteer(email=email))


# ============================================
# Service
# ============================================
class TestVolunteerService:
    def test_create_validates_before_saving(self, service, repo):
        with pytest.raises(InvalidInputError):
            service.create_volunteer(_volunteer(last_name=""))
        assert repo.count() == 0

    def test_create_keeps_supplied_id(self, service):
        created = service.create_volunteer(_volunteer(id="custom-id"))
        assert created.id == "custom-id"

    def test_partial_merge_law(self, service, greeter):
        stored = service.create_volunteer(greeter)
        edit = Volunteer(
            first_name="Mark",
            last_name=" ",
            contact_number="07000 000000",
            email="mark@example.org",
            role="",
            skills=[],
            active=False,
        )
        # the patch still has to pass full validation
        with pytest.raises(InvalidInputError):
            service.update_volunteer(stored.id, edit)

        edit.last_name = "Bell-Smith"
        merged = service.update_volunteer(stored.id, edit)
        assert merged.id == stored.id
        assert merged.first_name == "Mark"
        assert merged.last_name == "Bell-Smith"
        assert merged.contact_number == "07000 000000"
        assert merged.role == "Greeter"
        assert merged.skills == ["Warmth"]
        assert merged.active is False

    def test_update_replaces_populated_skills_and_dates(self, service, greeter):
        stored = service.create_volunteer(greeter)
        merged = service.update_volunteer(stored.id, _volunteer(
            skills=["Baking"], date_joined=date(2025, 5, 5),
        ))
        assert merged.skills == ["Baking"]
        assert merged.date_joined == date(2025, 5, 5)
        assert service.get_volunteer_by_id(stored.id).skills == ["Baking"]

    def test_update_keeps_id_even_if_patch_has_another(self, service, repo, greeter):
        stored = service.create_volunteer(greeter)
        merged = service.update_volunteer(stored.id, _volunteer(id="other-id"))
        assert merged.id == stored.id
        assert repo.find_by_id("other-id") is None
        assert repo.count() == 1

    @pytest.mark.parametrize("operation", ["get", "update", "delete"])
    def test_unknown_id_raises_not_found(self, service, repo, mirror_path, greeter, operation):
        service.create_volunteer(greeter)
        before = mirror_path.read_text()
        with pytest.raises(VolunteerNotFoundError) as exc_info:
            if operation == "get":
                service.get_volunteer_by_id("ghost")
            elif operation == "update":
                service.update_volunteer("ghost", _volunteer())
            else:
                service.delete_volunteer("ghost")
        assert exc_info.value.volunteer_id == "ghost"
        assert mirror_path.read_text() == before
        assert repo.count() == 1

    def test_delete_removes_record(self, service, repo, greeter):
        stored = service.create_volunteer(greeter)
        service.delete_volunteer(stored.id)
        assert repo.count() == 0

    def test_log_lines_carry_volunteer_id(self, service, greeter):
        with patch.object(volunteer_service, "logger", MagicMock()) as mock_logger:
            stored = service.create_volunteer(greeter)
            service.update_volunteer(stored.id, _volunteer(role="Usher"))
            service.delete_volunteer(stored.id)

        calls = mock_logger.info.call_args_list
        assert len(calls) == 3
        for call in calls:
            assert call.kwargs["extra"] == {"volunteer_id": stored.id}

    def test_json_formatter_emits_volunteer_id(self):
        record = logging.LogRecord(
            "volunteers", logging.INFO, __file__, 1, "Volunteer deleted", None, None,
        )
        record.volunteer_id = "v-42"
        line = json.loads(JSONFormatter().format(record))
        assert line["volunteer_id"] == "v-42"
        assert line["message"] == "Volunteer deleted"

    def test_search_runs_over_store(self, service, accountant, greeter):
        service.create_volunteer(accountant)
        service.create_volunteer(greeter)
        result = service.search_volunteers(
            SearchQuery(skills=["Integrity"], active=False, role="Accountant")
        )
        assert [v.id for v in result] == [accountant.id]

    def test_stats(self, service, accountant, greeter):
        service.create_volunteer(accountant)
        service.create_volunteer(greeter)
        service.create_volunteer(_volunteer(role=None, skills=["Warmth"]))
        stats = service.get_stats()
        assert stats["total"] == 3
        assert stats["active"] == 2
        assert stats["by_role"]["unassigned"] == 1
        assert stats["by_skill"]["Warmth"] == 2


# ============================================
# Concurrency
# ============================================
class TestConcurrentWrites:
    def test_concurrent_creates_are_not_lost(self, service, repo, mirror_path):
        total = 50

        def create(n):
            return service.create_volunteer(_volunteer(first_name=f"Volunteer {n}")).id

        with ThreadPoolExecutor(max_workers=8) as pool:
            ids = list(pool.map(create, range(total)))

        assert len(set(ids)) == total
        assert repo.count() == total
        on_disk = json.loads(mirror_path.read_text())
        assert len(on_disk) == total
        assert {r["id"] for r in on_disk} == set(ids)

    def test_concurrent_updates_and_reads(self, service, repo, mirror_path, greeter):
        stored = service.create_volunteer(greeter)

        def update(n):
            service.update_volunteer(stored.id, _volunteer(first_name=f"Name {n}"))
            return repo.find_all()

        with ThreadPoolExecutor(max_workers=8) as pool:
            snapshots = list(pool.map(update, range(20)))

        assert all(len(snapshot) == 1 for snapshot in snapshots)
        on_disk = json.loads(mirror_path.read_text())
        assert len(on_disk) == 1
        assert on_disk[0]["firstName"] == repo.find_by_id(stored.id).first_name

    def test_delete_during_update_is_not_resurrected(self, service, repo, mirror_path, greeter):
        stored = service.create_volunteer(greeter)
        merging = threading.Event()
        real_merge = volunteer_service.merge_volunteer

        def slow_merge(existing, edit):
            merging.set()
            time.sleep(0.2)
            return real_merge(existing, edit)

        with patch.object(volunteer_service, "merge_volunteer", side_effect=slow_merge):
            with ThreadPoolExecutor(max_workers=2) as pool:
                updating = pool.submit(
                    service.update_volunteer, stored.id, _volunteer(role="Usher"),
                )
                assert merging.wait(timeout=5)
                deleting = pool.submit(service.delete_volunteer, stored.id)
                updating.result()
                deleting.result()

        assert repo.count() == 0
        assert json.loads(mirror_path.read_text()) == []

    def test_concurrent_partial_updates_keep_both_changes(self, service, repo, greeter):
        stored = service.create_volunteer(greeter)
        merging = threading.Event()
        real_merge = volunteer_service.merge_volunteer

        def slow_first_merge(existing, edit):
            if not merging.is_set():
                merging.set()
                time.sleep(0.2)
            return real_merge(existing, edit)

        with patch.object(volunteer_service, "merge_volunteer", side_effect=slow_first_merge):
            with ThreadPoolExecutor(max_workers=2) as pool:
                new_role = pool.submit(
                    service.update_volunteer, stored.id, _volunteer(role="Usher", skills=[]),
                )
                assert merging.wait(timeout=5)
                new_skills = pool.submit(
                    service.update_volunteer, stored.id, _volunteer(role="", skills=["Baking"]),
                )
                new_role.result()
                new_skills.result()

        merged = repo.find_by_id(stored.id)
        assert merged.role == "Usher"
        assert merged.skills == ["Baking"]
