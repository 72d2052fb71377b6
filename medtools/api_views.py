"""
DRF API views for the RxNorm medication tools.
"""
import sys
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status
from .services import MedToolsService


def _run_tool(request, tool: str):
    """
    Shared body of the tool endpoints.

    Query params:
        drug: Medication name as typed by the user (required)

    Returns:
        200 with the tool result (status "ok") or spelling suggestions (status "no_match"),
        400 if drug is missing
    """
    search_term = request.GET.get('drug', '').strip()

    if not search_term:
        return Response(
            {"error": "drug is required"},
            status=status.HTTP_400_BAD_REQUEST
        )

    try:
        service = MedToolsService()
        result = service.run(tool, search_term)
        return Response(result.to_dict(), status=status.HTTP_200_OK)
    except Exception as e:
        import traceback
        print(f"Error in {tool} endpoint: {e}", file=sys.stderr)
        print(traceback.format_exc(), file=sys.stderr)
        return Response(
            {"error": f"Failed to run the {tool} tool"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )


@api_view(['GET'])
def medication_lookup(request):
    """
    Brand & ingredient lookup: active ingredient(s), U.S. brand names and
    example formulations.

    Example: GET /api/lookup/?drug=Tylenol
        {
            "status": "ok",
            "search_term": "Tylenol",
            "normalized_term": "Tylenol",
            "rxcui": "202433",
            "ingredients": ["Acetaminophen"],
            "brands": [...],
            "formulations": [...]
        }
    """
    return _run_tool(request, 'lookup')


@api_view(['GET'])
def alternative_brands(request):
    """
    Alternative brand finder: other brands sharing the same active ingredient(s).
    The searched brand itself is never listed.
    """
    return _run_tool(request, 'altbrands')


@api_view(['GET'])
def safety_check(request):
    """
    Side-effects & safety checker: adverse reaction classes, warnings,
    interactions and contraindications.
    """
    return _run_tool(request, 'safety')
