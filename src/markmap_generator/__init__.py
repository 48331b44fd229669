"""
Markmap Generator package.

Provides:
- A FastAPI proxy that turns text into markmap markdown via Gemini
- A command line client that extracts text from .txt/.md/.docx files
  and reads the proxy's line-delimited JSON response
"""
