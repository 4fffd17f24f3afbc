"""Salon Pricelist Audit Engine.

Pipeline for turning a scraped beauty-salon pricelist into an audit:
  1. Text-to-Structured Parser (HTML fallback)
  2. Listing Validator
  3. Statistics Engine
  4. Audit Report Orchestrator (three model calls, micro-format answers)
  5. Report Sanitizer & Normalizer

Input:  raw pricelist text (plus page HTML when available)
Output: AuditOutcome (document, statistics, report payloads)
"""
