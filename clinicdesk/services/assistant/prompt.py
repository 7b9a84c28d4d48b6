"""
Construction du prompt de l'assistant médical.

Un seul tour de conversation : le dossier du patient (identité, antécédents,
consultations de la plus récente à la plus ancienne) suivi de la question
du médecin.
"""

from typing import Iterable, List, Dict

from clinicdesk.models.patient import Patient, Visit

NO_INFORMATION_SENTENCE = "There is no information about this in the patient's record."


def _line(label: str, value) -> str:
    return f"- {label}: {value if value not in (None, '', []) else 'not recorded'}"


def format_patient_record(patient: Patient, visits: Iterable[Visit]) -> str:
    """Résumé textuel du dossier, consultations les plus récentes en premier."""
    gender = patient.gender.value if patient.gender else None
    chronic = ", ".join(patient.chronic_diseases or []) or None

    lines = [
        "PATIENT",
        _line("Name", patient.name),
        _line("Age", patient.age),
        _line("Gender", gender),
        _line("Chronic diseases", chronic),
        _line("Allergies", patient.allergies),
        "",
        "VISITS (most recent first)",
    ]

    ordered = sorted(visits, key=lambda v: v.visit_date, reverse=True)
    if not ordered:
        lines.append("- no visits recorded")
    for visit in ordered:
        lines.append(
            f"- {visit.visit_date:%Y-%m-%d} | diagnosis: {visit.diagnosis or '-'} "
            f"| treatment: {visit.treatment or '-'} | notes: {visit.notes or '-'}"
        )
    return "\n".join(lines)


def build_messages(
        patient: Patient,
        visits: Iterable[Visit],
        question: str,
        language: str,
) -> List[Dict[str, str]]:
    """Messages chat (system + user) envoyés au modèle."""
    system = (
        "You are a medical assistant helping a doctor review a patient's record. "
        "Answer concisely and accurately, using only the record below. "
        f"If the record does not contain the answer, say: \"{NO_INFORMATION_SENTENCE}\" "
        f"Always answer in {language}."
    )
    user = f"{format_patient_record(patient, visits)}\n\nQUESTION\n{question.strip()}"
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]
