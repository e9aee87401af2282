"""
Core corpus normalization components.

Modules:
  - records: Record, LanguageSubset, TranslationResult, MergedRecord
  - partitioner: split a corpus by language tag
  - similarity: bounded, symmetric text similarity
  - selection: translation selection policies
  - reconciler: multi-provider translation and agreement scoring
  - merger: order-preserving merge with exclusion accounting
  - pipeline: end-to-end orchestration with timeout/cancel
  - quality: post-merge text quality annotation
"""
