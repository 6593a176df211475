"""Transcript retrieval and answer pipeline for the StudyTube assistant.

This package fetches and caches YouTube transcripts, chunks and embeds them
into a per-video vector namespace, builds citation-aware prompts and streams
answers from the selected LLM provider.
"""
