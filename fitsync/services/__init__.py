"""Application services layer (session, controllers, onboarding).

Services coordinate domain records with infrastructure (storage, HTTP) and own
the state consumers read. They should avoid UI concerns.
"""
