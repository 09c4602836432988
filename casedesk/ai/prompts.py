"""
Prompt builders for the support-case analyses.

Prompts are written in Portuguese because the case data and the generated
reports are; the JSON keys of the conversation classification are the
field names stored with each conversation.
"""
from typing import Any, Dict, List, Mapping

URGENCY_LEVELS = ("baixa", "media", "alta", "critica")
CASE_CATEGORIES = ("tecnico", "financeiro", "atendimento", "operacional", "outro")
SENTIMENTS = ("positivo", "neutro", "negativo", "frustrado")
SUMMARY_MAX_CHARS = 150

IMPROVE_TEXT_SYSTEM_PROMPT = (
    "Você é um assistente que corrige ortografia, gramática e melhora a clareza de textos técnicos. "
    "Sempre retorne APENAS o texto melhorado, sem adicionar comentários, explicações ou formatação extra."
)

_IMPROVE_TEXT_INSTRUCTIONS: Dict[str, str] = {
    "investigation": (
        "Corrija erros de ortografia e gramática, e melhore a clareza do seguinte texto de "
        "investigação técnica. Mantenha o tom profissional e técnico."
    ),
    "analysis": (
        "Corrija erros de ortografia e gramática, e melhore a estrutura do seguinte texto de "
        "análise técnica. Mantenha o tom profissional."
    ),
    "solution": (
        "Corrija erros de ortografia e gramática, e melhore a clareza da seguinte descrição de "
        "solução técnica. Organize melhor as informações e mantenha o tom profissional."
    ),
    "response": (
        "Corrija erros de ortografia e gramática, e melhore a clareza da seguinte resposta ao "
        "cliente. Torne o texto mais claro e amigável, mas mantenha profissionalismo."
    ),
}

IMPROVE_TEXT_KINDS = tuple(_IMPROVE_TEXT_INSTRUCTIONS)


def transcript_analysis_prompt(transcript: str, media_kind: str) -> str:
    """Conversation classification prompt; the model must answer with bare JSON."""
    return f"""Você é um assistente especializado em análise de conteúdo.
Analise a seguinte transcrição de {media_kind} e retorne APENAS um JSON válido (sem markdown, sem explicações) com esta estrutura exata:

{{
  "urgencia": "{'|'.join(URGENCY_LEVELS)}",
  "categoria": "{'|'.join(CASE_CATEGORIES)}",
  "sentimento": "{'|'.join(SENTIMENTS)}",
  "resumo_curto": "resumo em até {SUMMARY_MAX_CHARS} caracteres",
  "contexto": "descrição detalhada do contexto",
  "problemas": ["problema 1", "problema 2"],
  "topicos": ["tópico 1", "tópico 2"],
  "insights": ["insight 1", "insight 2"]
}}

Transcrição a analisar:
{transcript}"""


def evidence_analysis_prompt(evidences: List[Mapping[str, Any]]) -> str:
    """
    Evidence analysis prompt.

    Args:
        evidences: Items with ``tipo`` and ``conteudo`` (``nome_arquivo`` optional)
    """
    blocks = []
    for evidence in evidences:
        block = f"Tipo: {evidence.get('tipo', '')}\nConteúdo: {evidence.get('conteudo', '')}\n"
        if evidence.get("nome_arquivo"):
            block = f"Arquivo: {evidence['nome_arquivo']}\n" + block
        blocks.append(block)

    separator = "\n---\n"
    return f"""Analise as seguintes evidências e forneça uma análise detalhada em português:

{separator.join(blocks)}
Retorne uma análise detalhada identificando:
- Problemas encontrados
- Possíveis causas
- Recomendações de solução
- Nível de gravidade"""


def it_report_prompt(report: Mapping[str, Any]) -> str:
    """Technical report prompt for the IT team."""
    lines = [
        f"Cliente: {report.get('cliente', '')}",
        f"Problema: {report.get('problema', '')}",
        f"Categoria: {report.get('categoria', '')}",
        f"Urgência: {report.get('urgencia', '')}",
    ]
    if report.get("investigacao"):
        lines.append(f"Investigação: {report['investigacao']}")
    if report.get("solucao"):
        lines.append(f"Solução: {report['solucao']}")
    details = "\n".join(lines)

    return f"""Gere um relatório técnico detalhado em português baseado nas seguintes informações:

{details}

Gere um relatório técnico completo para a equipe de TI com:
1. Resumo Executivo
2. Descrição do Problema
3. Análise Técnica
4. Solução Aplicada (se houver)
5. Recomendações"""


def improve_text_prompt(text: str, kind: str) -> str:
    """Proofreading prompt; unknown kinds fall back to ``solution``."""
    instructions = _IMPROVE_TEXT_INSTRUCTIONS.get(kind, _IMPROVE_TEXT_INSTRUCTIONS["solution"])
    return (
        f"{IMPROVE_TEXT_SYSTEM_PROMPT}\n\n"
        f"{instructions} Retorne apenas o texto melhorado, sem adicionar explicações ou comentários:\n\n"
        f"{text}"
    )
