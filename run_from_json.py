# run_from_json.py

from actuarial_symbols.document import create_symbol_document, load_document_data

INPUT_JSON_FILE = 'data/symbols.json'
OUTPUT_DOCX_FILE = 'actuarial_symbols.docx'


def main():
    """
    Builds a Word document of actuarial symbols from a local JSON file.
    """
    print(f"📄 Reading symbols from '{INPUT_JSON_FILE}'...")
    document_model = load_document_data(INPUT_JSON_FILE)
    if document_model is None:
        return

    print("⚙️ Rendering symbols...")
    document_bytes = create_symbol_document(document_model)

    with open(OUTPUT_DOCX_FILE, 'wb') as f:
        f.write(document_bytes)
    print(f"🎉 Saved '{OUTPUT_DOCX_FILE}'!")


if __name__ == "__main__":
    main()
