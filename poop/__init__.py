"""Interpreter for the poop esolang: lexer, recursive-descent parser and single-step term-rewriting evaluator."""

__version__ = "1.4.1"
