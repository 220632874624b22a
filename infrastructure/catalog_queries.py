# ============================================================================
# CATALOG QUERIES
# ============================================================================
# EPOCH: 1 - SCHEMA SYNC
# STATUS: Infrastructure - Read-only catalog SQL
# PURPOSE: information_schema / pg_catalog queries behind DatabaseMetadataSource
# CREATED: 17 OCT 2026
# ============================================================================
"""
Catalog Queries

All queries take a single named parameter, %(schema)s, and return rows
through psycopg's dict_row factory. Column aliases match the keys the
row converters in infrastructure.introspection expect.
"""

TEST_CONNECTION_QUERY = "SELECT 1 AS ok"

DATABASE_INFO_QUERY = """
SELECT current_database() AS database_name,
       current_user AS user_name,
       version() AS version
"""

SCHEMA_EXISTS_QUERY = """
SELECT EXISTS (
    SELECT 1 FROM pg_catalog.pg_namespace WHERE nspname = %(schema)s
) AS schema_exists
"""

LIST_SCHEMAS_QUERY = """
SELECT nspname AS schema_name
FROM pg_catalog.pg_namespace
WHERE nspname !~ '^pg_'
  AND nspname <> 'information_schema'
ORDER BY nspname
"""

TABLES_QUERY = """
SELECT c.relname AS table_name,
       pg_catalog.obj_description(c.oid, 'pg_class') AS comment
FROM pg_catalog.pg_class c
JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
WHERE n.nspname = %(schema)s
  AND c.relkind IN ('r', 'p')
  AND NOT c.relispartition
ORDER BY c.relname
"""

# Ordinal positions are renumbered so dropped columns leave no gaps
COLUMNS_QUERY = """
SELECT c.table_name,
       c.column_name,
       pg_catalog.format_type(a.atttypid, NULL) AS data_type,
       c.is_nullable = 'YES' AS is_nullable,
       c.column_default,
       c.character_maximum_length,
       CASE WHEN c.data_type = 'numeric' THEN c.numeric_precision END AS numeric_precision,
       CASE WHEN c.data_type = 'numeric' THEN c.numeric_scale END AS numeric_scale,
       c.datetime_precision,
       CASE WHEN c.is_identity = 'YES' THEN c.identity_generation END AS identity_generation,
       CASE WHEN c.is_generated = 'ALWAYS' THEN c.generation_expression END AS generation_expression,
       ROW_NUMBER() OVER (PARTITION BY c.table_name ORDER BY c.ordinal_position) AS ordinal_position,
       pg_catalog.col_description(a.attrelid, a.attnum) AS comment
FROM information_schema.columns c
JOIN pg_catalog.pg_namespace n ON n.nspname = c.table_schema
JOIN pg_catalog.pg_class t ON t.relname = c.table_name AND t.relnamespace = n.oid
JOIN pg_catalog.pg_attribute a ON a.attrelid = t.oid AND a.attname = c.column_name
WHERE c.table_schema = %(schema)s
  AND t.relkind IN ('r', 'p')
  AND NOT t.relispartition
ORDER BY c.table_name, c.ordinal_position
"""

CONSTRAINTS_QUERY = """
SELECT con.conname AS constraint_name,
       rel.relname AS table_name,
       CASE con.contype
            WHEN 'p' THEN 'PRIMARY KEY'
            WHEN 'f' THEN 'FOREIGN KEY'
            WHEN 'u' THEN 'UNIQUE'
            WHEN 'c' THEN 'CHECK'
            WHEN 'x' THEN 'EXCLUDE'
            WHEN 'n' THEN 'NOT NULL'
       END AS constraint_type,
       (SELECT STRING_AGG(a.attname, ', ' ORDER BY k.ord)
          FROM UNNEST(con.conkey) WITH ORDINALITY AS k(attnum, ord)
          JOIN pg_catalog.pg_attribute a
            ON a.attrelid = con.conrelid AND a.attnum = k.attnum) AS column_names,
       fn.nspname AS foreign_schema,
       frel.relname AS foreign_table,
       (SELECT STRING_AGG(a.attname, ', ' ORDER BY k.ord)
          FROM UNNEST(con.confkey) WITH ORDINALITY AS k(attnum, ord)
          JOIN pg_catalog.pg_attribute a
            ON a.attrelid = con.confrelid AND a.attnum = k.attnum) AS foreign_column_names,
       CASE con.confupdtype
            WHEN 'r' THEN 'RESTRICT'
            WHEN 'c' THEN 'CASCADE'
            WHEN 'n' THEN 'SET NULL'
            WHEN 'd' THEN 'SET DEFAULT'
            ELSE 'NO ACTION'
       END AS update_rule,
       CASE con.confdeltype
            WHEN 'r' THEN 'RESTRICT'
            WHEN 'c' THEN 'CASCADE'
            WHEN 'n' THEN 'SET NULL'
            WHEN 'd' THEN 'SET DEFAULT'
            ELSE 'NO ACTION'
       END AS delete_rule,
       CASE WHEN con.contype = 'c' THEN pg_catalog.pg_get_constraintdef(con.oid, true) END AS check_clause,
       pg_catalog.pg_get_constraintdef(con.oid, true) AS definition,
       con.condeferrable AS is_deferrable,
       con.condeferred AS is_initially_deferred
FROM pg_catalog.pg_constraint con
JOIN pg_catalog.pg_class rel ON rel.oid = con.conrelid
JOIN pg_catalog.pg_namespace n ON n.oid = rel.relnamespace
LEFT JOIN pg_catalog.pg_class frel ON frel.oid = con.confrelid
LEFT JOIN pg_catalog.pg_namespace fn ON fn.oid = frel.relnamespace
WHERE n.nspname = %(schema)s
  AND con.contype IN ('p', 'f', 'u', 'c', 'x', 'n')
  AND rel.relkind IN ('r', 'p')
ORDER BY rel.relname, con.conname
"""

INDEXES_QUERY = """
SELECT i.tablename AS table_name,
       i.indexname AS index_name,
       i.indexdef AS definition,
       ix.indisunique AS is_unique,
       ix.indisprimary AS is_primary,
       EXISTS (
           SELECT 1 FROM pg_catalog.pg_constraint con
           WHERE con.conindid = ix.indexrelid
             AND con.conrelid = ix.indrelid
             AND con.contype IN ('p', 'u', 'x')
       ) AS backs_constraint
FROM pg_catalog.pg_indexes i
JOIN pg_catalog.pg_namespace n ON n.nspname = i.schemaname
JOIN pg_catalog.pg_class ic ON ic.relname = i.indexname AND ic.relnamespace = n.oid
JOIN pg_catalog.pg_index ix ON ix.indexrelid = ic.oid
WHERE i.schemaname = %(schema)s
ORDER BY i.tablename, i.indexname
"""

# Extension-owned routines are not part of the schema's own definition
FUNCTIONS_QUERY = """
SELECT p.oid AS oid,
       p.proname AS function_name,
       CASE p.prokind WHEN 'p' THEN 'PROCEDURE' ELSE 'FUNCTION' END AS routine_type,
       pg_catalog.pg_get_function_result(p.oid) AS return_type,
       l.lanname AS language,
       p.prosrc AS body,
       p.provolatile AS volatility,
       p.prosecdef AS security_definer,
       pg_catalog.obj_description(p.oid, 'pg_proc') AS comment,
       pg_catalog.pg_get_functiondef(p.oid) AS definition
FROM pg_catalog.pg_proc p
JOIN pg_catalog.pg_namespace n ON n.oid = p.pronamespace
JOIN pg_catalog.pg_language l ON l.oid = p.prolang
WHERE n.nspname = %(schema)s
  AND p.prokind IN ('f', 'p')
  AND NOT EXISTS (
      SELECT 1 FROM pg_catalog.pg_depend d
      WHERE d.classid = 'pg_catalog.pg_proc'::regclass
        AND d.objid = p.oid
        AND d.deptype = 'e'
  )
ORDER BY p.proname, p.oid
"""

PARAMETERS_QUERY = """
SELECT p.oid AS oid,
       par.ordinal_position,
       par.parameter_name,
       par.parameter_mode,
       CASE
           WHEN par.data_type = 'USER-DEFINED' THEN par.udt_schema || '.' || par.udt_name
           WHEN par.data_type = 'ARRAY' THEN substr(par.udt_name, 2) || '[]'
           ELSE par.data_type
       END AS data_type,
       par.parameter_default
FROM information_schema.parameters par
JOIN pg_catalog.pg_proc p ON par.specific_name = p.proname || '_' || p.oid
JOIN pg_catalog.pg_namespace n ON n.oid = p.pronamespace
WHERE par.specific_schema = %(schema)s
  AND n.nspname = %(schema)s
ORDER BY p.oid, par.ordinal_position
"""

# One row per (trigger, event); folded into one descriptor per trigger
TRIGGERS_QUERY = """
SELECT t.trigger_name,
       t.event_object_table AS table_name,
       t.event_manipulation AS event,
       t.action_timing AS timing,
       t.action_orientation AS orientation,
       t.action_statement,
       t.action_condition AS condition
FROM information_schema.triggers t
WHERE t.trigger_schema = %(schema)s
ORDER BY t.event_object_table, t.trigger_name, t.event_manipulation
"""

# Identity columns own their sequences internally (deptype 'i')
SEQUENCES_QUERY = """
SELECT s.sequence_name,
       s.data_type,
       s.start_value,
       s.minimum_value,
       s.maximum_value,
       s.increment,
       s.cycle_option,
       pg_catalog.obj_description(c.oid, 'pg_class') AS comment
FROM information_schema.sequences s
JOIN pg_catalog.pg_namespace n ON n.nspname = s.sequence_schema
JOIN pg_catalog.pg_class c ON c.relname = s.sequence_name AND c.relnamespace = n.oid
WHERE s.sequence_schema = %(schema)s
  AND NOT EXISTS (
      SELECT 1 FROM pg_catalog.pg_depend d
      WHERE d.classid = 'pg_catalog.pg_class'::regclass
        AND d.objid = c.oid
        AND d.deptype = 'i'
  )
ORDER BY s.sequence_name
"""


__all__ = [
    "TEST_CONNECTION_QUERY",
    "DATABASE_INFO_QUERY",
    "SCHEMA_EXISTS_QUERY",
    "LIST_SCHEMAS_QUERY",
    "TABLES_QUERY",
    "COLUMNS_QUERY",
    "CONSTRAINTS_QUERY",
    "INDEXES_QUERY",
    "FUNCTIONS_QUERY",
    "PARAMETERS_QUERY",
    "TRIGGERS_QUERY",
    "SEQUENCES_QUERY",
]
