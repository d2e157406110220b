"""Auction house core: ledgers, clock, events and the auction state machine"""
