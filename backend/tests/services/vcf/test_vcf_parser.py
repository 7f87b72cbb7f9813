"""
Unit tests for the VCF variant extractor.
"""

import gzip

import pytest

from pharmarisk.services.pharmacogenomics.models import Variant
from pharmarisk.services.vcf.parser import (
    VcfSourceError,
    VcfTooLargeError,
    extract_variants,
    extract_variants_from_bytes,
    extract_variants_from_path,
    parse_record,
    tokenize_info,
)


def _line(info: str, vid: str = ".") -> str:
    return "\t".join(["chr22", "42130692", vid, "G", "A", "99", "PASS", info])


class TestTokenizeInfo:

    def test_known_tags_extracted(self):
        tags = tokenize_info("DP=30;GENE=CYP2D6;STAR=*4;RS=rs3892097")
        assert tags == {"GENE": "CYP2D6", "STAR": "*4", "RS": "rs3892097"}

    def test_first_occurrence_wins(self):
        tags = tokenize_info("GENE=CYP2D6;GENE=TPMT")
        assert tags["GENE"] == "CYP2D6"

    def test_values_not_matching_tag_pattern_are_ignored(self):
        tags = tokenize_info("GENE=CYP2D6;RS=abc123;STAR=")
        assert "RS" not in tags
        assert "STAR" not in tags

    def test_flags_and_missing_info(self):
        assert tokenize_info(".") == {}
        assert tokenize_info("") == {}
        assert tokenize_info("SOMATIC;DB") == {}


class TestParseRecord:

    def test_cyp2d6_star4_line(self):
        v = parse_record(_line("GENE=CYP2D6;STAR=*4;RS=rs3892097"))
        assert v == Variant(
            gene="CYP2D6",
            rsid="rs3892097",
            allele="*4",
            raw_info="GENE=CYP2D6;STAR=*4;RS=rs3892097",
        )

    def test_rs_tag_beats_id_column(self):
        v = parse_record(_line("GENE=CYP2C19;STAR=*2;RS=rs4244285", vid="rs99999"))
        assert v.rsid == "rs4244285"

    def test_id_column_used_when_rs_tag_absent(self):
        v = parse_record(_line("GENE=CYP2C19;STAR=*2", vid="rs4244285"))
        assert v.rsid == "rs4244285"

    def test_placeholder_id_yields_unknown_rsid(self):
        v = parse_record(_line("GENE=CYP2C19;STAR=*2", vid="."))
        assert v.rsid == "Unknown"

    def test_missing_star_yields_unknown_allele(self):
        v = parse_record(_line("GENE=DPYD"))
        assert v.allele == "Unknown"
        assert v.allele is not None

    def test_non_panel_gene_is_ignored(self):
        assert parse_record(_line("GENE=BRCA1;STAR=*1")) is None
        assert parse_record(_line("GENE=CYP2D6X;STAR=*4")) is None
        assert parse_record(_line("STAR=*4;RS=rs3892097")) is None

    def test_short_line_is_skipped(self):
        assert parse_record("chr22\t42130692\trs3892097\tG\tA\t99\tPASS") is None
        assert parse_record("") is None

    def test_extra_columns_are_allowed(self):
        line = _line("GENE=TPMT;STAR=*3A") + "\tGT\t0/1"
        v = parse_record(line)
        assert v.gene == "TPMT"
        assert v.allele == "*3A"


class TestExtractVariants:

    def test_sample_file(self, vcf_lines):
        variants = extract_variants(vcf_lines)

        assert [v.gene for v in variants] == ["CYP2D6", "CYP2C9", "TPMT"]
        assert variants[0].rsid == "rs3892097"
        assert variants[1].rsid == "rs1799853"
        assert variants[2].rsid == "Unknown"
        assert variants[2].allele == "Unknown"

    def test_comment_lines_are_not_inspected(self):
        lines = ["#" + _line("GENE=CYP2D6;STAR=*4"), _line("GENE=TPMT;STAR=*2")]
        variants = extract_variants(lines)
        assert [v.gene for v in variants] == ["TPMT"]

    def test_repeated_calls_are_kept_in_file_order(self):
        lines = [
            _line("GENE=CYP2D6;STAR=*4"),
            _line("GENE=TPMT;STAR=*2"),
            _line("GENE=CYP2D6;STAR=*4"),
            _line("GENE=CYP2D6;STAR=*10"),
        ]
        variants = extract_variants(lines)
        assert [(v.gene, v.allele) for v in variants] == [
            ("CYP2D6", "*4"),
            ("TPMT", "*2"),
            ("CYP2D6", "*4"),
            ("CYP2D6", "*10"),
        ]

    def test_malformed_lines_never_raise(self):
        lines = ["garbage", "a\tb\tc", "\t\t\t", _line("GENE=SLCO1B1;STAR=*5")]
        variants = extract_variants(lines)
        assert len(variants) == 1
        assert variants[0].gene == "SLCO1B1"

    def test_crlf_line_endings(self):
        lines = [_line("GENE=CYP2C9;STAR=*3") + "\r\n"]
        variants = extract_variants(lines)
        assert variants[0].raw_info == "GENE=CYP2C9;STAR=*3"

    def test_no_qualifying_lines_is_empty(self):
        assert extract_variants(["##fileformat=VCFv4.2", "#CHROM\tPOS"]) == []


class TestSources:

    def test_from_bytes(self, vcf_text):
        variants = extract_variants_from_bytes(vcf_text.encode("utf-8"))
        assert len(variants) == 3

    def test_from_gzip_bytes(self, vcf_text):
        variants = extract_variants_from_bytes(gzip.compress(vcf_text.encode("utf-8")))
        assert len(variants) == 3

    def test_unicode_line_separator_inside_info_is_kept(self):
        info = "GENE=CYP2D6;NOTE=a\u2028b;STAR=*4;RS=rs3892097"
        variants = extract_variants_from_bytes(_line(info).encode("utf-8"))
        assert len(variants) == 1
        assert variants[0].allele == "*4"
        assert variants[0].rsid == "rs3892097"
        assert variants[0].raw_info == info

    def test_bytes_and_path_split_lines_alike(self, tmp_path):
        text = _line("GENE=TPMT;NOTE=x\x0cy;STAR=*3A") + "\r" + _line("GENE=DPYD;STAR=*2A") + "\r\n"
        p = tmp_path / "mixed.vcf"
        p.write_bytes(text.encode("utf-8"))
        from_bytes = extract_variants_from_bytes(text.encode("utf-8"))
        assert from_bytes == extract_variants_from_path(p)
        assert [v.allele for v in from_bytes] == ["*3A", "*2A"]

    def test_gzip_within_limit(self, vcf_text):
        raw = vcf_text.encode("utf-8")
        variants = extract_variants_from_bytes(gzip.compress(raw), max_bytes=len(raw))
        assert len(variants) == 3

    def test_gzip_inflating_past_limit_is_rejected(self, vcf_text):
        raw = ("##" + "x" * 100_000 + "\n" + vcf_text).encode("utf-8")
        content = gzip.compress(raw)
        assert len(content) < 4096
        with pytest.raises(VcfTooLargeError):
            extract_variants_from_bytes(content, max_bytes=4096)

    def test_too_large_is_a_source_error(self):
        assert issubclass(VcfTooLargeError, VcfSourceError)

    def test_truncated_gzip_bytes_raise_source_error(self, vcf_text):
        content = gzip.compress(vcf_text.encode("utf-8"))
        with pytest.raises(VcfSourceError):
            extract_variants_from_bytes(content[: len(content) // 2])

    def test_undecodable_bytes_raise_source_error(self):
        with pytest.raises(VcfSourceError):
            extract_variants_from_bytes(b"\xff\xfe\xfa" + _line("GENE=CYP2D6").encode())

    def test_source_error_is_an_ioerror(self):
        assert issubclass(VcfSourceError, IOError)

    def test_from_path(self, tmp_path, vcf_text):
        p = tmp_path / "sample.vcf"
        p.write_text(vcf_text, encoding="utf-8")
        variants = extract_variants_from_path(p)
        assert [v.gene for v in variants] == ["CYP2D6", "CYP2C9", "TPMT"]

    def test_from_gzip_path(self, tmp_path, vcf_text):
        p = tmp_path / "sample.vcf.gz"
        with gzip.open(p, "wt", encoding="utf-8") as f:
            f.write(vcf_text)
        assert len(extract_variants_from_path(p)) == 3

    def test_missing_path_raises_ioerror(self, tmp_path):
        with pytest.raises(IOError):
            extract_variants_from_path(tmp_path / "missing.vcf")

    def test_undecodable_path_raises_ioerror(self, tmp_path):
        p = tmp_path / "latin.vcf"
        p.write_bytes(_line("GENE=CYP2D6;NOTE=caf\xe9").encode("latin-1"))
        with pytest.raises(IOError):
            extract_variants_from_path(p)

    def test_truncated_gzip_path_raises_ioerror(self, tmp_path, vcf_text):
        content = gzip.compress(vcf_text.encode("utf-8"))
        p = tmp_path / "trunc.vcf.gz"
        p.write_bytes(content[: len(content) // 2])
        with pytest.raises(VcfSourceError):
            extract_variants_from_path(p)

    def test_gzip_suffix_is_case_insensitive(self, tmp_path, vcf_text):
        p = tmp_path / "SAMPLE.VCF.GZ"
        with gzip.open(p, "wt", encoding="utf-8") as f:
            f.write(vcf_text)
        assert len(extract_variants_from_path(p)) == 3
