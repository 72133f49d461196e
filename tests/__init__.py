"""
Tests package - Test suite for the CRD apply engine.

Contains:
- unit/: Unit tests for individual components
- fixtures/: Fake clients, clocks and sample documents
"""
