# =============================================================================
# test_assembler.py - Assembler Integration Tests
# =============================================================================
# Tests for the assemble() entry point and the Assembler class.
#
# Test coverage includes:
#   - End-to-end assembly of complete programs
#   - All-or-nothing results with every error reported together
#   - Error ordering and de-duplication across both passes
#   - Determinism
#   - Object, listing and symbol file output
# =============================================================================

import pytest

from lc3_sdk.assembler import Assembler, AssemblyFailed, assemble
from lc3_sdk.config import ToolchainConfig
from lc3_sdk.errors import LC3Error
from lc3_sdk.image import ObjectImage


# =============================================================================
# End-to-End Tests
# =============================================================================

class TestAssemble:
    """Complete programs through both passes."""

    def test_hello(self, hello_source):
        result = assemble(hello_source)
        assert result.ok
        assert result.errors == ()
        assert result.image.start == 0x3000
        assert result.image.body() == [0xE002, 0xF022, 0xF025, 0x48, 0x49, 0x0000]

    def test_hello_symbols(self, hello_source):
        result = assemble(hello_source)
        assert dict(result.symbols.items()) == {"MSG": 0x3003}

    def test_countdown(self, countdown_source):
        result = assemble(countdown_source)
        assert result.ok
        assert result.image.body() == [
            0x2206,  # LD R1, COUNT
            0x2406,  # LD R2, ASCII
            0x1042,  # LOOP ADD R0, R1, R2
            0xF021,  # OUT
            0x127F,  # ADD R1, R1, #-1
            0x03FC,  # BRp LOOP
            0xF025,  # HALT
            0x0003,  # COUNT
            0x0030,  # ASCII
        ]

    def test_origin_only(self):
        result = assemble(".ORIG x3000\n.END")
        assert result.ok
        assert len(result.image) == 0

    def test_image_serializes(self):
        result = assemble(".ORIG x3000\nHALT\n.END\n")
        assert result.image.to_bytes() == bytes.fromhex("3000f025")

    def test_deterministic(self, countdown_source):
        """Assembling the same source twice gives identical images."""
        first = assemble(countdown_source)
        second = assemble(countdown_source)
        assert first.image == second.image
        assert first.image.to_bytes() == second.image.to_bytes()

    def test_listing_entries(self, hello_source):
        result = assemble(hello_source)
        assert [entry.line.number for entry in result.listing] == [1, 2, 3, 4, 5, 6]

    def test_warnings(self):
        result = assemble(".ORIG x3000\nHALT\n.END\nJUNK\n")
        assert result.ok
        assert result.warnings == ("line 4: content after .END is ignored",)


# =============================================================================
# Error Reporting Tests
# =============================================================================

class TestAssembleErrors:
    """Errors from both passes are returned together."""

    def test_failure_has_no_image(self):
        result = assemble(".ORIG x3000\nLD R1, NOWHERE\n.END")
        assert not result.ok
        assert result.image is None
        assert [e.kind for e in result.errors] == ["UndefinedLabel"]

    def test_both_passes_reported(self):
        result = assemble(
            ".ORIG x3000\n"
            "    LD R1, NOWHERE\n"   # Pass 2
            "A   HALT\n"
            "A   HALT\n"             # Pass 1
            "    ADD R1, R1, #16\n"  # Pass 2
            ".END\n"
        )
        assert [(e.kind, e.line) for e in result.errors] == [
            ("UndefinedLabel", 2),
            ("DuplicateLabel", 4),
            ("OffsetOutOfRange", 5),
        ]

    def test_error_seen_by_both_passes_reported_once(self):
        result = assemble(".ORIG x3000\n.BLKW COUNT\nHALT\n.END")
        assert len(result.errors) == 1
        assert result.errors[0].kind == "MalformedOperand"

    def test_missing_origin_only(self):
        """Lines before an origin are not encoded, so only MissingOrigin appears."""
        result = assemble("LD R1, NOWHERE\nADD R9, R1, R1\nHALT\n")
        assert [e.kind for e in result.errors] == ["MissingOrigin"]

    def test_error_records(self):
        result = assemble(".ORIG x3000\nLD R1, X\n.END")
        assert result.error_records() == [
            {"kind": "UndefinedLabel", "line": 2, "message": "undefined label 'X'"},
        ]

    def test_filename_in_locations(self):
        result = assemble(".ORIG x3000\nADD R8, R1, R1\n.END", filename="prog.asm")
        assert str(result.errors[0]).startswith("prog.asm:2:5: error:")

    def test_error_cap(self):
        source = ".ORIG x3000\n" + "ADD R9, R1, R1\n" * 10 + ".END\n"
        result = assemble(source, max_errors=3)
        assert len(result.errors) == 3
        assert result.image is None


# =============================================================================
# Assembler Class Tests
# =============================================================================

class TestAssemblerClass:
    """The file-oriented facade."""

    def test_assemble_string(self, hello_source):
        asm = Assembler()
        image = asm.assemble_string(hello_source)
        assert image.start == 0x3000
        assert asm.get_image() is image
        assert not asm.has_errors()

    def test_assemble_failure_raises(self):
        asm = Assembler()
        with pytest.raises(AssemblyFailed) as exc_info:
            asm.assemble_string(".ORIG x3000\nADD R8, R1, R1\nLD R1, X\n.END", "bad.asm")
        error = exc_info.value
        assert len(error.errors) == 2
        assert "bad.asm:2:5" in error.report
        assert "2 errors" in error.report
        assert str(error) == "assembly failed with 2 errors"
        assert asm.has_errors()

    def test_result_before_assembly(self):
        with pytest.raises(LC3Error):
            Assembler().result

    def test_get_image_after_failure(self):
        asm = Assembler()
        with pytest.raises(AssemblyFailed):
            asm.assemble_string("HALT")
        with pytest.raises(LC3Error):
            asm.get_image()

    def test_config_error_cap(self):
        asm = Assembler(ToolchainConfig(max_errors=2))
        with pytest.raises(AssemblyFailed) as exc_info:
            asm.assemble_string(".ORIG x3000\n" + "ADD R9, R1, R1\n" * 5 + ".END")
        assert len(exc_info.value.errors) == 2

    def test_assemble_file(self, hello_asm):
        asm = Assembler()
        image = asm.assemble_file(hello_asm)
        assert len(image) == 6
        assert asm.get_symbols() == {"MSG": 0x3003}

    def test_assemble_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Assembler().assemble_file(tmp_path / "missing.asm")

    def test_write_obj(self, hello_source, tmp_path):
        asm = Assembler()
        asm.assemble_string(hello_source)
        path = tmp_path / "hello.obj"
        asm.write_obj(path)
        assert path.read_bytes() == bytes.fromhex("3000e002f022f025004800490000")
        assert ObjectImage.read(path) == asm.get_image()

    def test_write_listing(self, hello_source, tmp_path):
        asm = Assembler()
        asm.assemble_string(hello_source)
        path = tmp_path / "hello.lst"
        asm.write_listing(path)
        text = path.read_text()
        assert "x3001  F022     3  TRAP x22" in text
        assert "Symbol Table" in text

    def test_write_symbols(self, hello_source, tmp_path):
        asm = Assembler()
        asm.assemble_string(hello_source)
        path = tmp_path / "hello.sym"
        asm.write_symbols(path)
        assert path.read_text().splitlines() == [
            "# Symbol table",
            "# Generated by lc3asm",
            "MSG x3003",
        ]
