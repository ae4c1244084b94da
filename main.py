# main.py

"""Streamlit review console for the PHI guard system.

Provides a simple interface to scan free text for PHI, review the redacted
output, and inspect the audit trail produced by each scan.
"""

import logging

import streamlit as st

from phi_guard.core.definitions import RedactionMethod
from phi_guard.logging_config import configure_logging
from phi_guard.service.config import settings
from phi_guard.service.pipeline import PHIScanService, build_audit_logger

configure_logging(settings.log_level)

logger = logging.getLogger(__name__)


@st.cache_resource
def get_service() -> PHIScanService:
    """Builds the scan service once per Streamlit server process."""
    audit_logger = build_audit_logger(settings).init()
    return PHIScanService(audit_logger)


def main():
    """Run the Streamlit application UI.

    This function configures the page, accepts input text from the user,
    runs the scan service, and displays the redacted output, risk
    assessment, and recent audit events.
    """
    st.set_page_config(layout="wide", page_title="PHI Guard", page_icon="🛡️")

    st.title("PHI Guard")
    st.markdown(
        "Pattern-based detection and redaction of Protected Health Information (PHI) in free text."
    )
    st.markdown("---")

    service = get_service()

    with st.sidebar:
        st.header("Session")
        user_id = st.text_input("User ID", value="reviewer")
        resource_id = st.text_input("Document ID", value="document-1")
        method = st.selectbox(
            "Redaction method",
            sorted(RedactionMethod.ALL),
            index=sorted(RedactionMethod.ALL).index(settings.default_redaction_method),
        )
        st.header("Patterns")
        selected_types = st.multiselect(
            "Redact only these types (empty = all)", service.detector.pattern_names
        )

    col1, col2 = st.columns(2)

    with col1:
        st.subheader("Input Text")
        text_input = st.text_area(
            "Source Document",
            height=400,
            placeholder="Paste clinical document text here...",
        )

    with col2:
        st.subheader("Redacted Output")

        if st.button("Scan for PHI", type="primary"):
            if not text_input or not text_input.strip():
                st.warning("Please enter text to process.")
                logger.warning("Scan attempted with empty input")

            else:
                with st.spinner("Analyzing document..."):
                    report = service.scan(
                        text_input,
                        user_id=user_id,
                        resource_id=resource_id,
                        method=method,
                        allowed_types=selected_types or None,
                    )

                if not report.ok:
                    st.error(f"Scan failed: {report.metadata['error']}")
                else:
                    st.text_area(
                        "Redacted Document",
                        value=report.redaction.redacted_text,
                        height=400,
                    )
                    st.metric("Risk level", report.risk.risk_level.upper())
                    st.success(
                        f"Scan complete. Redacted {report.redaction.redaction_count} "
                        f"of {report.summary.total_matches} matches."
                    )
                    st.json(report.summary.by_type)

    st.markdown("---")
    st.subheader("Audit Trail")

    metrics = service.audit_logger.get_compliance_metrics()
    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Events", metrics.total_events)
    m2.metric("PHI detections", metrics.phi_detections)
    m3.metric("Redactions", metrics.redactions)
    m4.metric("High-risk events", metrics.high_risk_events)

    st.download_button(
        "Export audit log (CSV)",
        data=service.audit_logger.export_audit_log("csv"),
        file_name="audit_log.csv",
        mime="text/csv",
    )

    st.dataframe(
        [
            {
                "time": e.timestamp.isoformat(),
                "user": e.user_id,
                "action": e.action,
                "resource": e.resource_id,
                "risk": e.risk_level,
                "flags": ", ".join(e.compliance_flags),
            }
            for e in service.audit_logger.get_events()[:50]
        ]
    )


if __name__ == "__main__":
    main()
