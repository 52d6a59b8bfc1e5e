"""
Tax Modules.

Thin orchestration layers over the tax kernel and engines.
Each module contains:
- Domain models (the nouns)
- ORM persistence models and read-only stores
- Configuration schemas (policy and settings)
- Services (the verbs)

Modules:
- Determination: classification, configuration resolution, itemized
  calculation, and bulk calculation

Actual processing logic lives in the kernel and engines.
"""
