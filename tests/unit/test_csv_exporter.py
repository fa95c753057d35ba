"""
Unit tests for catalog materialization (CSV rows + best-effort images)
"""

import asyncio

import pytest

from catalog_crawler.adapters.base import ProductCandidate
from catalog_crawler.errors import StorageError
from catalog_crawler.export.base import CSV_HEADERS
from catalog_crawler.export.csv_exporter import (
    CatalogMaterializer,
    build_rows,
    image_filename,
    render_csv,
)

HEADER = "id;nome;descricao;preco;estoque;categoria;sku;tamanhos;cores;sabores;estoque_variantes;imagem"


def materialize(fetcher, candidates, limit, csv_path, image_dir):
    return asyncio.run(CatalogMaterializer(fetcher).materialize(candidates, limit, csv_path, image_dir))


class TestRows:

    @pytest.mark.parametrize("limit, expected", [(0, 0), (2, 2), (3, 3), (50, 3)])
    def test_row_count_is_min_of_limit_and_candidates(self, sample_candidates, limit, expected):
        assert len(build_rows(sample_candidates, limit)) == expected

    def test_truncation_keeps_order_and_numbering(self, sample_candidates):
        rows = build_rows(sample_candidates, 2)
        assert [(r.sku, r.name) for r in rows] == [("AUTO-1", "Produto A"), ("AUTO-2", "Produto B")]

    def test_name_delimiters_collapse(self):
        rows = build_rows([ProductCandidate(name="Kit;\r\nBanho;;Tosa\n", price_text="", image_url="")], 1)
        assert rows[0].name == "Kit Banho Tosa"

    def test_render_layout(self, sample_candidates):
        text = render_csv(build_rows(sample_candidates, 1))
        assert text == HEADER + "\n" + ";Produto A;;10,00;;;AUTO-1;;;;;https://shop.test/a.jpg\n"
        assert HEADER.split(";") == list(CSV_HEADERS)

    def test_image_filename(self):
        assert image_filename("AUTO-3", "https://x.test/a.png?w=200") == "auto-3.png"
        assert image_filename("AUTO-3", "https://x.test/a.webp") == "auto-3.jpg"


class TestMaterializer:

    def test_writes_csv_and_images(self, stub_fetcher, sample_candidates, job_dirs):
        csv_path, image_dir = job_dirs
        result = materialize(stub_fetcher, sample_candidates, 10, csv_path, image_dir)

        assert result.item_count == 3
        lines = csv_path.read_text(encoding="utf-8").splitlines()
        assert lines[0] == HEADER
        assert [line.split(";")[6] for line in lines[1:]] == ["AUTO-1", "AUTO-2", "AUTO-3"]
        assert [line.split(";")[3] for line in lines[1:]] == ["10,00", "20,50", "7,50"]
        assert sorted(p.name for p in image_dir.iterdir()) == ["auto-1.jpg", "auto-2.png"]
        assert (image_dir / "auto-1.jpg").read_bytes() == stub_fetcher.payload

    def test_non_http_image_is_not_fetched(self, stub_fetcher, sample_candidates, job_dirs):
        csv_path, image_dir = job_dirs
        materialize(stub_fetcher, sample_candidates[2:], 10, csv_path, image_dir)

        assert stub_fetcher.calls == []
        assert list(image_dir.iterdir()) == []
        row = csv_path.read_text(encoding="utf-8").splitlines()[1]
        assert row.startswith(";Produto C;;7,50;;;AUTO-1;")

    def test_failed_fetch_keeps_row(self, stub_fetcher_factory, sample_candidates, job_dirs):
        csv_path, image_dir = job_dirs
        fetcher = stub_fetcher_factory(fail={"https://shop.test/a.jpg"})
        result = materialize(fetcher, sample_candidates[:2], 10, csv_path, image_dir)

        assert result.item_count == 2
        assert [p.name for p in image_dir.iterdir()] == ["auto-2.png"]

    def test_missing_image_dir_is_not_fatal(self, stub_fetcher, sample_candidates, tmp_path):
        csv_path = tmp_path / "produtos.csv"
        result = materialize(stub_fetcher, sample_candidates, 10, csv_path, tmp_path / "nope")
        assert result.item_count == 3
        assert csv_path.exists()

    def test_csv_write_failure_is_fatal(self, stub_fetcher, sample_candidates, tmp_path):
        with pytest.raises(StorageError):
            materialize(stub_fetcher, sample_candidates, 10, tmp_path / "missing" / "produtos.csv", tmp_path)

    def test_same_input_same_bytes(self, stub_fetcher, sample_candidates, tmp_path):
        first, second = tmp_path / "a.csv", tmp_path / "b.csv"
        materialize(stub_fetcher, sample_candidates, 2, first, tmp_path)
        materialize(stub_fetcher, sample_candidates, 2, second, tmp_path)
        assert first.read_bytes() == second.read_bytes()
