"""manual_rag.generation

Answer generation for the manual assistant: prompt templates rendered with
Jinja2 and chat-model wrappers built on LangChain.

Modules
-------
prompt_builder
    Named prompt templates and the bundled ``manual_assistant`` prompt.
llm_interface
    Provider-agnostic LLM interface and factory.
"""
