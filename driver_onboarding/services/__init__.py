"""
Services package - business logic of the driver registration pipeline.

Modules:
    - profiles: driver profile store and conditional status transitions
    - documents / storage: document store adapter and blob storage
    - vehicles: vehicle registry
    - registration: driver-facing step operations
    - verification: admin verification gate
    - status: registration progress projector
"""
