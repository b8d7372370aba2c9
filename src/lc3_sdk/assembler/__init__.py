"""
LC-3 Assembler
==============

This package turns LC-3 assembly source into an ObjectImage that the
emulator can load, and classifies source text for editor highlighting.

Main Components
---------------
- **Lexer**: Lossless, total tokenizer (``tokenize``)
- **Parser**: Groups tokens into SourceLine records (``split_lines``)
- **SymbolBuilder**: Pass 1, label addresses (``build_symbols``)
- **Encoder**: Pass 2, instruction and data words (``encode``)
- **Assembler**: File-oriented facade with listing and symbol output

Assembly Process
----------------
1. **Lexing**: source text becomes a flat, restartable token stream.
2. **Pass 1**: an address cursor walks the lines from ``.ORIG`` and
   records each label's address.
3. **Pass 2**: the same walk encodes every instruction and directive,
   resolving labels through the completed symbol table.

Errors from both passes are collected and returned together; an image is
produced only if there are none.

Example Usage
-------------
>>> from lc3_sdk.assembler import assemble
>>> result = assemble(".ORIG x3000\\nHALT\\n.END\\n")
>>> result.image.to_bytes().hex()
'3000f025'
"""

from lc3_sdk.assembler.assembler import Assembler, AssemblyFailed, AssemblyResult, assemble
from lc3_sdk.assembler.codegen import Encoder, ListingEntry, encode, format_listing
from lc3_sdk.assembler.lexer import Lexer, Token, TokenKind, TokenStream, detokenize, tokenize
from lc3_sdk.assembler.parser import SourceLine, split_lines
from lc3_sdk.assembler.symbols import Symbol, SymbolBuilder, SymbolTable, build_symbols

__all__ = [
    # Main interface
    "Assembler",
    "AssemblyFailed",
    "AssemblyResult",
    "assemble",
    # Lexer
    "Lexer",
    "Token",
    "TokenKind",
    "TokenStream",
    "tokenize",
    "detokenize",
    # Parser
    "SourceLine",
    "split_lines",
    # Pass 1
    "Symbol",
    "SymbolBuilder",
    "SymbolTable",
    "build_symbols",
    # Pass 2
    "Encoder",
    "ListingEntry",
    "encode",
    "format_listing",
]
