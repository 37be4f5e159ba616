"""
Application services layer (use cases).

Services orchestrate the domain logic to fulfill application use cases:
- frontier: thread-safe dedup set of already processed units
- worker_pool: bounded, paced, retrying execution of discovery units
- extraction: raw file listings -> season/episode/source/file trees
- matcher: candidate scoring against canonical metadata
- reconciler: search, select and merge canonical metadata into titles
- crawler: discover/crawl orchestration with checkpoints and merge

Services depend on ports (interfaces) from core/ and never on the
HTTP clients from adapters/. The crawler writes checkpoints through the
CheckpointStore it is given.
"""
