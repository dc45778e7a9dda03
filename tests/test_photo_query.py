import pytest

from photosite.photo_query import PhotoActionRequest, PhotoListRequest


def test_normalize():
    req = PhotoListRequest(
        page=0,
        page_size=100,
        sort="unknown",
        order="bad",
        tag_mode="",
        orientation="bad",
        year=3000,
        month=13,
    )
    req.normalize()
    assert req.page == 1
    assert req.page_size == 60
    assert req.sort == "shot_time"
    assert req.order == "desc"
    assert req.tag_mode == "any"
    assert req.orientation == ""
    assert (req.year, req.month) == (0, 0)


def test_normalize_keeps_valid_values():
    req = PhotoListRequest(
        q="  sky ",
        page=2,
        page_size=20,
        sort="view_count",
        order="ASC",
        orientation=" Landscape ",
        year=2025,
        month=6,
        tag_mode="ALL",
        category=" 旅行 ",
    )
    req.normalize()
    assert req.q == "sky"
    assert (req.page, req.page_size) == (2, 20)
    assert (req.sort, req.order) == ("view_count", "asc")
    assert req.orientation == "landscape"
    assert (req.year, req.month) == (2025, 6)
    assert req.tag_mode == "all"
    assert req.category == "旅行"


def test_normalize_zero_page_size_uses_default():
    req = PhotoListRequest(page_size=0)
    req.normalize()
    assert req.page_size == 30


def test_tag_list():
    req = PhotoListRequest(tags="风光, 夕阳，风光、 海边")
    assert req.tag_list() == ["风光", "夕阳", "海边"]


def test_tag_list_case_insensitive_dedupe():
    req = PhotoListRequest(tags="Sea sea SEA sky")
    assert req.tag_list() == ["Sea", "sky"]


def test_tag_list_empty():
    assert PhotoListRequest(tags="   ").tag_list() == []


def test_keyword_list():
    req = PhotoListRequest(q="天空,风筝")
    assert req.keyword_list() == ["天空", "风筝"]


def test_from_query_binds_fields():
    req = PhotoListRequest.from_query(
        {"q": "天空,风筝", "page": "2", "pageSize": "20", "sort": "view_count", "order": "asc"}
    )
    assert req.q == "天空,风筝"
    assert req.page == 2
    assert req.page_size == 20
    assert req.sort == "view_count"
    assert req.order == "asc"
    assert req.tags == ""


def test_from_query_takes_first_of_many_and_empty_int_is_zero():
    req = PhotoListRequest.from_query({"tagMode": ["all", "any"], "year": ""})
    assert req.tag_mode == "all"
    assert req.year == 0


@pytest.mark.parametrize("raw", ["abc", "1.5", " 3"])
def test_from_query_rejects_bad_integer(raw):
    with pytest.raises(ValueError):
        PhotoListRequest.from_query({"page": raw})


def test_action_request_source_limit():
    assert PhotoActionRequest(source="gallery").source == "gallery"
    with pytest.raises(ValueError):
        PhotoActionRequest(source="x" * 61)