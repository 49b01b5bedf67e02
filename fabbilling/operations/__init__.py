"""Operations layer for billing workflows."""
