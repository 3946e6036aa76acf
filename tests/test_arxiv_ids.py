import pytest

from paper_inbox import arxiv_ids


def test_base_id_validation():
    assert arxiv_ids.is_valid_base_id("2311.12022")
    assert arxiv_ids.is_valid_base_id("0704.0001")
    assert arxiv_ids.is_valid_base_id("cs/9901001")
    assert arxiv_ids.is_valid_base_id("cs.DS/0101001")
    assert not arxiv_ids.is_valid_base_id("2301.1234v2")
    assert not arxiv_ids.is_valid_base_id("not-an-id")


def test_base_id_from_versioned():
    assert arxiv_ids.base_id_from_versioned("2311.12022v2") == "2311.12022"
    assert arxiv_ids.base_id_from_versioned("cs.DS/0101001v3") == "cs.DS/0101001"
    assert arxiv_ids.base_id_from_versioned("randomv2") == "randomv2"


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://arxiv.org/pdf/1234.5678.pdf", "1234.5678"),
        ("https://arxiv.org/pdf/2311.12022v2", "2311.12022v2"),
        ("https://arxiv.org/abs/2311.12022", "2311.12022"),
        ("https://arxiv.org/pdf/cs/9901001v1.pdf", "cs/9901001v1"),
        ("https://export.arxiv.org/papers/2311.12022.pdf", "2311.12022"),
    ],
)
def test_arxiv_id_from_url(url, expected):
    assert arxiv_ids.arxiv_id_from_url(url) == expected


def test_arxiv_id_from_url_without_path():
    with pytest.raises(ValueError):
        arxiv_ids.arxiv_id_from_url("https://arxiv.org/")


def test_abs_url_for():
    assert arxiv_ids.abs_url_for("1234.5678") == "https://arxiv.org/abs/1234.5678"
