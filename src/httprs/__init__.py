"""httprs -- a friendly command-line HTTP client.

A whole request is written as a flat list of short tokens after the
method and URL::

    httprs post https://httpbin.org/post name=alice age=30
    httprs get https://api.github.com/users/torvalds Accept:application/json
    httprs get https://httpbin.org/get page==2
    httprs post https://httpbin.org/post photo@./image.jpg
    httprs get https://example.com/file.zip -d

Responses are rendered with syntax highlighting on a terminal and written
byte-for-byte when piped.

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the package.
    items: Request-item token classifier.
    auth: ``-a`` credential resolution.
    body: JSON / multipart body encoding.
    assembler: Folds items and flags into a request descriptor.
    client: httpx transport adapter and streamed response view.
    renderer: Response rendering (status, headers, highlighted body).
    download: Streaming downloads with progress reporting.
    timing: Request timing for verbose output.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes.
    output: stdout/stderr output system with Rich support.
"""

__version__ = "0.3.0"
