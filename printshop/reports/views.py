import logging
from datetime import timedelta
from decimal import Decimal

from django.db.models import Sum, Count, F, DecimalField, ExpressionWrapper
from django.db.models.functions import TruncMonth
from django.utils import timezone
from django.views.decorators.cache import cache_control
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from printshop.core.responses import success_response
from printshop.jobsheets.models import JobSheet
from printshop.parties.models import Party, PartyTransaction

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')
CHART_MONTHS = 12
RECENT_DAYS = 7

job_cost = ExpressionWrapper(F('printing') + F('uv') + F('baking'),
                             output_field=DecimalField(max_digits=14, decimal_places=2))


def _month_start(day, months_back=0):
    year, month = day.year, day.month - months_back
    while month <= 0:
        month += 12
        year -= 1
    return day.replace(year=year, month=month, day=1)


def _active_job_sheets():
    return JobSheet.objects.filter(is_deleted=False)


@cache_control(public=True, max_age=60, stale_while_revalidate=300)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_stats(request):
    """Headline numbers for the dashboard"""
    today = timezone.localdate()
    job_sheets = _active_job_sheets()

    sheet_totals = job_sheets.aggregate(
        total_job_sheets=Count('id'),
        total_revenue=Sum(job_cost),
        total_impressions=Sum('imp'),
    )
    monthly_revenue = job_sheets.filter(
        job_date__gte=_month_start(today), job_date__lte=today,
    ).aggregate(total=Sum(job_cost))['total']
    party_totals = Party.objects.aggregate(total_parties=Count('id'), total_balance=Sum('balance'))

    return success_response({
        'totalJobSheets': sheet_totals['total_job_sheets'] or 0,
        'totalParties': party_totals['total_parties'] or 0,
        'totalBalance': party_totals['total_balance'] or ZERO,
        'totalRevenue': sheet_totals['total_revenue'] or ZERO,
        'monthlyRevenue': monthly_revenue or ZERO,
        'activeTransactions': PartyTransaction.objects.filter(is_deleted=False).count(),
        'totalImpressions': sheet_totals['total_impressions'] or 0,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_overview(request):
    """Revenue trend, month-over-month growth, production totals and last week's activity"""
    today = timezone.localdate()
    job_sheets = _active_job_sheets()
    this_month = _month_start(today)
    last_month = _month_start(today, 1)

    sheet_revenue = job_sheets.aggregate(total=Sum(job_cost))['total'] or ZERO
    payment_revenue = PartyTransaction.objects.filter(type='payment', is_deleted=False).aggregate(
        total=Sum('amount'))['total'] or ZERO
    combined_revenue = sheet_revenue + payment_revenue

    this_month_revenue = job_sheets.filter(job_date__gte=this_month).aggregate(
        total=Sum(job_cost))['total'] or ZERO
    last_month_revenue = job_sheets.filter(job_date__gte=last_month, job_date__lt=this_month).aggregate(
        total=Sum(job_cost))['total'] or ZERO
    growth = ((this_month_revenue - last_month_revenue) / last_month_revenue * 100) if last_month_revenue else ZERO

    chart_start = _month_start(today, CHART_MONTHS - 1)
    monthly = {
        row['month'].strftime('%Y-%m'): row
        for row in job_sheets.filter(job_date__gte=chart_start)
        .annotate(month=TruncMonth('job_date'))
        .values('month')
        .annotate(job_sheets=Count('id'), revenue=Sum(job_cost))
        .order_by('month')
    }
    chart = []
    for months_back in range(CHART_MONTHS - 1, -1, -1):
        month = _month_start(today, months_back)
        row = monthly.get(month.strftime('%Y-%m'), {})
        count = row.get('job_sheets', 0)
        revenue = row.get('revenue') or ZERO
        chart.append({
            'month': month.strftime('%b'),
            'year': month.year,
            'jobSheets': count,
            'revenue': revenue,
            'efficiency': round(revenue / count) if count else 0,
        })

    production = job_sheets.aggregate(total_paper_sheets=Sum('paper_sheet'), total_impressions=Sum('imp'))
    job_count = job_sheets.count()
    week_ago = timezone.now() - timedelta(days=RECENT_DAYS)

    return success_response({
        'revenue': {
            'total': combined_revenue,
            'jobSheets': sheet_revenue,
            'payments': payment_revenue,
            'thisMonth': this_month_revenue,
            'lastMonth': last_month_revenue,
            'growth': round(growth, 2),
            'avgOrderValue': (combined_revenue / job_count).quantize(Decimal('0.01')) if job_count else ZERO,
        },
        'production': {
            'totalJobSheets': job_count,
            'totalPaperSheets': production['total_paper_sheets'] or 0,
            'totalImpressions': production['total_impressions'] or 0,
        },
        'recentActivity': {
            'jobSheets': job_sheets.filter(created_at__gte=week_ago).count(),
            'transactions': PartyTransaction.objects.filter(is_deleted=False, created_at__gte=week_ago).count(),
        },
        'chartData': chart,
    })
