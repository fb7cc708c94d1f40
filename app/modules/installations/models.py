# Supabase table: installations
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure (see app/database/schema.sql):
- id: serial (primary key)
- uuid: uuid (unique, default: gen_random_uuid()) - key used for updates
- installation_id: text (unique, not null) - Vercel integration configuration ID
- account_id: integer (foreign key to accounts.id)
- app_name: text (default: 'assistant-server')
- vercel_project_id: text (nullable)
- vercel_project_name: text (nullable)
- deployment_url: text (nullable)
- status: text (default: 'pending') - values: pending, installed, failed
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())
"""
