# Supabase table: accounts
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure (see app/database/schema.sql):
- id: serial (primary key)
- uuid: uuid (unique, default: gen_random_uuid())
- vercel_user_id: text (unique, not null) - upsert conflict target
- vercel_team_id: text (nullable)
- access_token: text (not null) - AES-256-GCM ciphertext, see app.core.encryption
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())
"""
