"""
Lyric retrieval package.

- models: result envelopes and format enums
- provider: LyricProvider, the search collaborator
- metadata: get_lyric_metadata, the metadata collaborator
"""
