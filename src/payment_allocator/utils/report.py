import logging, textwrap
import pandas as pd, numpy as np

logger = logging.getLogger(__name__)


def instrument_usage(result, instruments):
    """One row per instrument: limit, used, remaining and utilisation %."""
    df = pd.DataFrame({
        'instrument_id': [i.id for i in instruments],
        'discount': [float(i.discount) for i in instruments],
        'limit': [float(i.limit) for i in instruments],
    })
    df['used'] = df['instrument_id'].map(lambda iid: float(result.consumed.get(iid, 0)))
    df['remaining'] = df['limit'] - df['used']
    df['utilization_pct'] = (df['used'] / df['limit'].replace(0, np.nan) * 100).round(1)
    return df


def order_summary(result, orders):
    """Per-order totals from the payment log: paid amount, discount, phases used."""
    pays = result.payments_frame()
    base = pd.DataFrame({'order_id': [o.id for o in orders],
                         'value': [float(o.amount) for o in orders]})
    if pays.empty:
        base['paid'] = 0.0
        base['discount'] = 0.0
        base['phase'] = ''
        return base
    pays['amount'] = pays['amount'].astype(float)
    pays['discount'] = pays['discount'].astype(float)
    agg = (pays.groupby('order_id', sort=False)
               .agg(paid=('amount', 'sum'), discount=('discount', 'sum'),
                    phase=('phase', lambda s: ','.join(dict.fromkeys(s))))
               .reset_index())
    out = base.merge(agg, on='order_id', how='left')
    out[['paid', 'discount']] = out[['paid', 'discount']].fillna(0.0)
    out['phase'] = out['phase'].fillna('')
    return out


def print_summary(result, orders, instruments, label="Allocation"):
    usage = instrument_usage(result, instruments)
    per_order = order_summary(result, orders)
    over = usage[usage['used'] > usage['limit']]
    total_value = per_order['value'].sum()
    total_discount = per_order['discount'].sum()

    summary_text = textwrap.dedent(f"""
        ── {label} summary ───────────────────────────────────────
        orders            : {len(per_order):,}
        orders paid       : {len(result.paid):,}
        Σ order value     : {total_value:,.2f}
        Σ discount        : {total_discount:,.2f}  ({(total_discount / total_value * 100) if total_value else 0.0:.2f} %)
        path              : {' -> '.join(s.value for s in result.states)}
        limit violations  : {'0' if over.empty else over.set_index('instrument_id')['used'].to_dict()}
        wall time         : {result.elapsed:.3f}s
        ──────────────────────────────────────────────────────────
    """).strip()
    logger.info(summary_text)

    exhausted = usage[(usage['limit'] > 0) & (usage['remaining'] <= 0)]
    if not exhausted.empty:
        logger.info(f"Fully used payment methods ({len(exhausted)}):")
        logger.info(exhausted[['instrument_id', 'limit', 'used', 'utilization_pct']].to_string(index=False))
    unused = usage[usage['used'] == 0]
    if not unused.empty:
        logger.info(f"Unused payment methods ({len(unused)}): {', '.join(unused['instrument_id'])}")
    return usage, per_order
