# main.py

import os

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from actuarial_symbols.document import create_symbol_document
from actuarial_symbols.elements import ELEMENT_REGISTRY, register_default_elements
from actuarial_symbols.families import FAMILY_RENDERERS, render_family, resolve_family
from actuarial_symbols.mathml import to_mathml_string
from actuarial_symbols.omml import to_omml_string
from actuarial_symbols.schemas import RenderRequest, SymbolDocumentModel
from actuarial_symbols.symbol_tree import extract_text

DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

app = FastAPI(
    title="Actuarial Symbols API",
    description="Renders international actuarial notation as MathML, Office Math or Word documents",
    version="1.0.0",
)

origins = [
    origin.strip()
    for origin in os.environ.get("ACT_SYMBOLS_CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_default_elements()


@app.get("/")
def read_root():
    """
    Health check.

    Returns:
        dict: A welcome message.
    """
    return {"message": "Actuarial Symbols API is running."}


@app.get("/families")
def list_families():
    return {"families": sorted(FAMILY_RENDERERS), "elements": dict(ELEMENT_REGISTRY)}


@app.post("/render")
def render_endpoint(request: RenderRequest):
    """
    Renders one symbol.

    Args:
        request (RenderRequest): Family (or element tag), its attributes and the output format.

    Raises:
        HTTPException: 404 when the family is unknown.

    Returns:
        dict: The family, format, markup string, plain text and the symbol tree.
    """
    family = resolve_family(request.family)
    if family is None:
        raise HTTPException(status_code=404, detail=f"Unknown symbol family '{request.family}'.")

    tree = render_family(family, request.attributes)
    markup = to_omml_string(tree) if request.format == "omml" else to_mathml_string(tree)
    return {"family": family, "format": request.format, "markup": markup, "text": extract_text(tree),
            "tree": tree.model_dump()}


@app.post("/export")
def export_endpoint(request: SymbolDocumentModel):
    """
    Builds a Word document containing every requested symbol.

    Raises:
        HTTPException: 400 when the request has no symbols, 404 for an unknown family.
    """
    if not request.symbols:
        raise HTTPException(status_code=400, detail="At least one symbol is required.")
    unknown = [entry.family for entry in request.symbols if resolve_family(entry.family) is None]
    if unknown:
        raise HTTPException(status_code=404, detail=f"Unknown symbol families: {', '.join(unknown)}")

    try:
        document_bytes = create_symbol_document(request)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {e}")

    return Response(
        content=document_bytes,
        media_type=DOCX_MIME_TYPE,
        headers={"Content-Disposition": 'attachment; filename="actuarial_symbols.docx"'},
    )
