# actuarial_symbols/document.py
import io
import json
from typing import Callable, Optional

from docx import Document
from docx.shared import Pt
from pydantic import ValidationError

from .families import render_family
from .omml import to_omml
from .schemas import SymbolDocumentModel


def load_document_data(filepath: str) -> Optional[SymbolDocumentModel]:
    """
    Reads the list of symbols to export from a JSON file.

    Args:
        filepath (str): Path of the JSON file.

    Returns:
        SymbolDocumentModel | None: None when the file cannot be read or validated.
    """
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            return SymbolDocumentModel.model_validate(json.load(f))
    except FileNotFoundError:
        print(f"Error: file not found -> {filepath}")
    except json.JSONDecodeError:
        print(f"Error: invalid JSON -> {filepath}")
    except ValidationError as e:
        print(f"Error: JSON does not describe a symbol document -> {filepath}\n    {e}")
    return None


def create_symbol_document(document_model: SymbolDocumentModel,
                           log_callback: Optional[Callable[[str], None]] = None) -> bytes:
    """
    Builds a Word document with one Office Math paragraph per symbol.

    Args:
        document_model (SymbolDocumentModel): Title, alignment and the symbols to render.
        log_callback (Optional[Callable[[str], None]]): Receives a progress line per symbol.

    Returns:
        bytes: The .docx file content.
    """
    def log(message: str):
        print(message)
        if log_callback:
            log_callback(message)

    document = Document()
    if document_model.title:
        document.add_heading(document_model.title, 0)

    for i, entry in enumerate(document_model.symbols):
        log(f"Processing symbol #{i + 1} ({entry.family})...")
        if entry.label:
            p = document.add_paragraph()
            run = p.add_run(entry.label)
            run.bold = True
            run.font.size = Pt(10)

        tree = render_family(entry.family, entry.attributes)
        p = document.add_paragraph()
        p._p.append(to_omml(tree, document_model.alignment))

    output_stream = io.BytesIO()
    document.save(output_stream)
    log(f"✅ Document built with {len(document_model.symbols)} symbol(s).")
    return output_stream.getvalue()
