"""Derivations computed from one transcription run.

Segments come from a TranscriptionBackend; chapters, analysis, the search
index and captions are all derived from that same segment sequence.
"""
