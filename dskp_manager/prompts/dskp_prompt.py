DSKP_EXTRACTION_PROMPT = (
    "Extract Standard Kandungan (SK) and Standard Pembelajaran (SP) from this DSKP document. "
    "Return as a JSON array of objects with 'sk' and 'sp' fields."
)

STUDENT_LIST_PROMPT = "Extract a list of student names from this file. Return as a JSON array of strings."

def build_suggest_prompt(subject_name: str, year_level: str) -> str:
    return (
        f'Suggest a list of Standard Kandungan (SK) and Standard Pembelajaran (SP) for the subject "{subject_name}" '
        f'at year level "{year_level}" based on the Malaysian DSKP curriculum. '
        "Return as a JSON array of objects with 'sk' and 'sp' fields. Provide at least 5 relevant entries."
    )
