"""
Constants for ChatDesk.
"""


# ----- Provider -----

# Every request goes out with this model, whatever the settings say.
PINNED_MODEL = "claude-3-7-sonnet-20250219"

ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_API_VERSION = "2023-06-01"
REQUEST_TIMEOUT_SECONDS = 60.0


# ----- Generation defaults -----

DEFAULT_MODEL = PINNED_MODEL
DEFAULT_MAX_TOKENS = 4096
DEFAULT_TEMPERATURE = 0.7
DEFAULT_TOP_P = 1.0


# ----- Defaults -----

DEFAULT_CHAT_TITLE = "New chat"
DEFAULT_GREETING = "Hello!"
DEFAULT_ARTIFACT_TYPE = "text/plain"
DEFAULT_ARTIFACT_TITLE = "Artifact"
GENERIC_BINARY_TYPE = "application/octet-stream"


# ----- Request assembly delimiters -----

ATTACHMENT_TEXT_TEMPLATE = (
    "### Contents of file {name} ###\n\n{text}\n\n### End of file {name} ###"
)
ATTACHMENT_BINARY_TEMPLATE = (
    "[Attached binary file: {name}, type: {type}, size: {size} bytes]"
)
PROJECT_HEADER_TEMPLATE = "\n\n### PROJECT CONTEXT ({count} files) ###\n"
PROJECT_FILE_TEXT_TEMPLATE = "### Project file: {name} ###\n\n{text}\n\n"
PROJECT_FILE_BINARY_TEMPLATE = (
    "[Binary project file: {name}, type: {type}, size: {size} bytes]"
)
PROJECT_FOOTER = "\n### END OF PROJECT CONTEXT ###\n\n"


# ----- System prompt -----

DEFAULT_SYSTEM_PROMPT = """You are a helpful assistant.

When you produce a standalone piece of content that the user may want to keep, \
such as a code file, a document, an HTML page or an SVG image, wrap it in an \
artifact tag:

<artifact identifier="unique-id" type="mime-type" title="Short title" language="optional-language">
content
</artifact>

Rules for artifacts:
1. Use a unique, descriptive identifier for every artifact in a reply.
2. Supported types: "application/vnd.ant.code" for source code (set language), \
"text/markdown" for documents, "text/html" for web pages, "image/svg+xml" for \
SVG images and "application/vnd.ant.mermaid" for diagrams.
3. Keep short snippets and explanations in the reply text, not in artifacts.
4. Never nest artifacts."""
