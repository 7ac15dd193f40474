"""Meeting processing pipeline -- data models, store, and processing services.

Provides the entity model (Pydantic schemas), the MeetingStore repository,
the derivation components (transcription, chapters, analysis, search,
captions), the minutes components (summarizer, exporter, notifier), and the
MeetingPipeline service that orchestrates them.
"""
