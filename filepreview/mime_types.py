SUPPORTED_FORMATS = {
    # Documents
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    # Spreadsheets
    "xls": "application/vnd.ms-excel",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "csv": "text/csv",
    # Presentations
    "ppt": "application/vnd.ms-powerpoint",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    # Text formats
    "markdown": "text/markdown",
    "md": "text/markdown",
    "txt": "text/plain",
    "xml": "application/xml",
}

# extension -> previewer kind
PREVIEW_KINDS = {
    "pdf": "pdf",
    "xls": "excel",
    "xlsx": "excel",
    "csv": "csv",
    "doc": "word",
    "docx": "word",
    "ppt": "powerpoint",
    "pptx": "powerpoint",
    "markdown": "markdown",
    "md": "markdown",
    "txt": "text",
    "xml": "xml",
}


def get_content_type(extension: str | None) -> str | None:
    if not extension:
        return None
    return SUPPORTED_FORMATS.get(extension.lower().lstrip("."))
