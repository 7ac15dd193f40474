"""Post-processing outputs -- summaries, document exports and minutes previews.

Summarizer produces named summary variants per style and language.
ExportRenderer assembles downloadable documents and records them in the
meeting's export history. MinutesNotifier builds per-participant minutes
messages from the current summary, chapters and action items.
"""
