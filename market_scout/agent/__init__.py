"""Conversation agent: normalization, state machine, patches and turn pipeline."""
