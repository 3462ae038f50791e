"""
Domain services for P&ID Sync.

Contains the main business logic services:
- shape_catalog: Shape kinds, their ports and the node factory
- canvas: Drawing surface abstraction and the headless canvas
- topology: Pipe splicing, instrument taps and routing exclusions
- persistence: Drawing save/load against the Neo4j plant graph
- drawing_catalog: Drawing sheet management
- editor: Editing session with the unsaved-changes gate
"""
