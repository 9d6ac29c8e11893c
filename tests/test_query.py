import pytest
from pydantic import ValidationError

from core.query import ListParams, page_meta, resolve_sort
from users.crud import USER_SORT_FIELDS, list_users
from conftest import make_user


# -----------------------------------------------------------------------------------
# Parameter normalisation
# -----------------------------------------------------------------------------------
def test_defaults():
    params = ListParams()
    assert (params.page, params.limit, params.sort_by, params.sort_order) == (1, 10, "id", "DESC")
    assert params.search is None
    assert params.offset == 0


@pytest.mark.parametrize("raw, expected", [("asc", "ASC"), ("ASC", "ASC"), (" Asc ", "ASC"),
                                           ("desc", "DESC"), ("sideways", "DESC"), ("", "DESC")])
def test_sort_order_is_asc_or_desc(raw, expected):
    assert ListParams(sort_order=raw).sort_order == expected


def test_blank_search_becomes_none():
    assert ListParams(search="   ").search is None
    assert ListParams(search="  bob ").search == "bob"


@pytest.mark.parametrize("kwargs", [{"page": 0}, {"limit": 0}, {"limit": 101}])
def test_out_of_range_values_are_rejected(kwargs):
    with pytest.raises(ValidationError):
        ListParams(**kwargs)


def test_offset():
    assert ListParams(page=3, limit=20).offset == 40


def test_unknown_sort_field_falls_back_to_id():
    assert resolve_sort("password", USER_SORT_FIELDS) == "id"
    assert resolve_sort("username", USER_SORT_FIELDS) == "username"
    assert resolve_sort(None, USER_SORT_FIELDS) == "id"


def test_page_meta():
    meta = page_meta(page=2, limit=10, total=25)
    assert meta.totalPages == 3
    assert meta.hasNext is True
    assert meta.hasPrev is True

    last = page_meta(page=3, limit=10, total=25)
    assert last.hasNext is False

    empty = page_meta(page=1, limit=10, total=0)
    assert (empty.totalPages, empty.hasNext, empty.hasPrev) == (0, False, False)


# -----------------------------------------------------------------------------------
# Against the database
# -----------------------------------------------------------------------------------
@pytest.fixture
def seven_users(db):
    return [make_user(db, f"member{i}", "secret1") for i in range(7)]


def test_pagination_window_and_total(db, seven_users):
    result = list_users(db, ListParams(page=2, limit=3, sort_order="asc"))
    assert [u.username for u in result["data"]] == ["member3", "member4", "member5"]
    meta = result["pagination"]
    assert (meta.total, meta.totalPages, meta.hasNext, meta.hasPrev) == (7, 3, True, True)


def test_page_past_the_end_is_empty(db, seven_users):
    result = list_users(db, ListParams(page=9, limit=3))
    assert result["data"] == []
    assert result["pagination"].total == 7
    assert result["pagination"].hasNext is False


def test_search_is_case_insensitive_and_counts_filtered_set(db, seven_users):
    make_user(db, "Zelda", "secret1")
    result = list_users(db, ListParams(search="zEL"))
    assert [u.username for u in result["data"]] == ["Zelda"]
    assert result["pagination"].total == 1


def test_search_treats_wildcards_literally(db, seven_users):
    make_user(db, "under_score", "secret1")
    assert list_users(db, ListParams(search="%"))["pagination"].total == 0
    result = list_users(db, ListParams(search="_"))
    assert [u.username for u in result["data"]] == ["under_score"]


def test_invalid_sort_field_uses_id(db, seven_users):
    result = list_users(db, ListParams(sort_by="password; DROP TABLE users", sort_order="ASC"))
    ids = [u.id for u in result["data"]]
    assert ids == sorted(ids)


def test_http_layer_rejects_out_of_range_limit(admin_client):
    assert admin_client.get("/api/admin/users", params={"limit": 101}).status_code == 422
    assert admin_client.get("/api/admin/users", params={"page": 0}).status_code == 422


def test_blank_search_matches_omitted_search(admin_client, db, seven_users):
    omitted = admin_client.get("/api/admin/users").json()
    for blank in ("", "   "):
        assert admin_client.get("/api/admin/users", params={"search": blank}).json() == omitted
