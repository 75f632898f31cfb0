"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Send a single prompt to the Groq chat-completions API.
- Translate SDK failures into the recommendation error taxonomy.
"""
