"""Core domain logic for patient tracking.

This package contains the business logic and domain models,
isolated from rendering and storage backends for easy testing and reasoning.
"""
